"""CLI for medcard: serve / render-card commands."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.table import Table

from medcard.core.config import AppSettings
from medcard.models import CardInput, EncounterData, PatientProfile, coerce_card_input

ModelT = TypeVar("ModelT", bound=BaseModel)

app = typer.Typer(name="medcard", help="Symptom intake chat and bilingual medical cards")
console = Console()


def _load_json(path: Path) -> dict[str, Any]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise typer.BadParameter(f"Expected JSON object in {path}")
    return raw


def _validate(model: type[ModelT], payload: dict[str, Any], path: Path) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise typer.BadParameter(f"{path} is not a valid {model.__name__}: {e}") from e


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default from MEDCARD_API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default from MEDCARD_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = AppSettings()
    uvicorn.run(
        "medcard.api.app:app",
        host=host or settings.api.host,
        port=port or settings.api.port,
        reload=reload,
    )


@app.command("render-card")
def render_card(
    encounter_file: Path = typer.Argument(..., help="JSON file with encounter or structured card fields"),
    profile_file: Optional[Path] = typer.Option(None, "--profile", help="JSON file with the patient profile"),
    out: Path = typer.Option(Path("card.pdf"), "--out", help="Output PDF path"),
    enrich: bool = typer.Option(False, "--enrich", help="Run the enrichment model call first"),
    today: Optional[str] = typer.Option(None, help="Reference date for age (YYYY-MM-DD)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Compose a medical card PDF locally, without touching any store."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    from medcard.formatters.pdf_formatter import CardFormatter, format_pain_score, resolve_emergency

    settings = AppSettings()
    payload = _load_json(encounter_file)
    profile = _validate(PatientProfile, _load_json(profile_file), profile_file) if profile_file else PatientProfile()
    reference_day = date.fromisoformat(today) if today else None

    card: CardInput
    if enrich:
        from medcard.cards.enrichment import CardEnricher
        from medcard.inference import create_inference_backend

        encounter = _validate(EncounterData, payload, encounter_file)
        enricher = CardEnricher(create_inference_backend(settings), settings.llm.enrichment_model)
        console.print(f"[bold]Enriching with {settings.llm.enrichment_model}[/bold]")
        card = asyncio.run(enricher.enrich(encounter))
    else:
        try:
            card = coerce_card_input(payload)
        except ValidationError as e:
            raise typer.BadParameter(f"{encounter_file} does not describe a card: {e}") from e

    formatter = CardFormatter(settings.pdf)
    formatter.format_to_file(profile, card, out, today=reference_day)

    table = Table(title="Medical Card")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Mode", card.kind)
    table.add_row("Patient", profile.display_name)
    table.add_row("Emergency", "[red]yes[/red]" if resolve_emergency(card) else "[green]no[/green]")
    pain = card.data.pain_score if card.kind == "enriched" else card.symptom_severity
    table.add_row("Pain score", format_pain_score(pain))
    console.print(table)
    console.print(f"[green]Card saved to {out}[/green]")


if __name__ == "__main__":
    app()
