"""medcard: symptom intake chat and bilingual medical card generation.

Usage::

    from medcard import (
        AppSettings,
        IntakeService, CardService, CardEnricher,
        EncounterData, PatientProfile, StructuredCardData,
        RawCard, EnrichedCard,
    )
"""

from __future__ import annotations

from typing import Any

from medcard.cards.enrichment import CardEnricher
from medcard.core.config import AppSettings
from medcard.exceptions import (
    BlobStoreError,
    InvalidRequest,
    MalformedModelOutput,
    MedcardError,
    RecordNotFoundError,
    UpstreamError,
    UpstreamGatewayError,
    UpstreamStoreError,
)
from medcard.intake.service import IntakeOutcome, IntakeService
from medcard.models import (
    CardInput,
    EncounterData,
    EncounterRecord,
    EnrichedCard,
    MedicalRecordMeta,
    PatientProfile,
    RawCard,
    StructuredCardData,
)
from medcard.services.card_service import CardService, GeneratedCard

__all__ = [
    "AppSettings",
    "BlobStoreError",
    "CardEnricher",
    "CardFormatter",
    "CardInput",
    "CardService",
    "EncounterData",
    "EncounterRecord",
    "EnrichedCard",
    "GeneratedCard",
    "IntakeOutcome",
    "IntakeService",
    "InvalidRequest",
    "MalformedModelOutput",
    "MedcardError",
    "MedicalRecordMeta",
    "PatientProfile",
    "RawCard",
    "RecordNotFoundError",
    "StructuredCardData",
    "UpstreamError",
    "UpstreamGatewayError",
    "UpstreamStoreError",
]


def __getattr__(name: str) -> Any:
    """Lazy-load CardFormatter so reportlab is only imported when needed."""
    if name == "CardFormatter":
        from medcard.formatters.pdf_formatter import CardFormatter

        return CardFormatter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
