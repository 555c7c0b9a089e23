"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medcard.api.middleware.error_handler import register_error_handlers
from medcard.api.routes import cards, chat, health
from medcard.cards.enrichment import CardEnricher
from medcard.core.config import APIConfig, AppSettings
from medcard.core.logging_config import setup_logging
from medcard.core.startup_checks import validate_settings
from medcard.formatters.pdf_formatter import CardFormatter
from medcard.inference import IInferenceBackend, create_inference_backend
from medcard.intake.service import IntakeService
from medcard.persistence import IPersistenceBackend, create_persistence_backend
from medcard.prompts import load_system_prompt
from medcard.services.card_service import CardService
from medcard.stores import ConversationStore, IBlobStore, RecordStore, create_blob_store

log = logging.getLogger(__name__)


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("medcard")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def wire_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    gateway: Optional[IInferenceBackend] = None,
    persistence: Optional[IPersistenceBackend] = None,
    blob_store: Optional[IBlobStore] = None,
) -> None:
    """Build stores and services from ``settings`` onto ``app.state``.

    Collaborators passed explicitly replace the configured ones.
    """
    if gateway is None:
        gateway = create_inference_backend(settings)
    if persistence is None:
        persistence = create_persistence_backend(settings.persistence)
    if blob_store is None:
        blob_store = create_blob_store(settings.storage)

    params: dict[str, Any] = {}
    if settings.llm.temperature is not None:
        params["temperature"] = settings.llm.temperature

    records = RecordStore(persistence)
    enricher = (
        CardEnricher(gateway, settings.llm.enrichment_model, **params) if settings.llm.enrichment_enabled else None
    )

    app.state.settings = settings
    app.state.records = records
    app.state.intake_service = IntakeService(
        gateway=gateway,
        conversations=ConversationStore(persistence),
        records=records,
        system_prompt=load_system_prompt(settings.intake),
        model=settings.llm.chat_model,
        history_limit=settings.intake.history_limit,
        confirmation_message=settings.intake.confirmation_message,
        record_turns=settings.intake.record_turns,
        **params,
    )
    app.state.card_service = CardService(
        records=records,
        blob_store=blob_store,
        formatter=CardFormatter(settings.pdf),
        enricher=enricher,
        storage=settings.storage,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup/shutdown lifecycle."""
    settings = AppSettings()
    validate_settings(settings)
    setup_logging(settings.observability)
    wire_services(app, settings)
    log.info("medcard ready", extra={"chat_model": settings.llm.chat_model})
    yield


def configure_app(app: FastAPI) -> FastAPI:
    """Attach middleware, error handlers and routers."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(cards.router)
    return app


_api_config = APIConfig()

app = configure_app(
    FastAPI(
        title=_api_config.title,
        description=_api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )
)
