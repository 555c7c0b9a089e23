"""Pydantic data models for medcard.

Records persisted by the stores (turns, encounters, profiles, card metadata)
and the two card input shapes accepted by the composer.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

NAME_DISPLAY_DEFAULT = "이름 없음"
LANGUAGE_DISPLAY_DEFAULT = "English"
NOT_AVAILABLE = "N/A"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Conversation ─────────────────────────────────────────────────────


class ChatTurn(BaseModel):
    """One role/content turn in an intake thread."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


# ── Encounters ───────────────────────────────────────────────────────


class EncounterData(BaseModel):
    """The five mandatory fields of a finalized intake."""

    chief_complaint: str
    symptom_onset: str
    symptom_severity: str
    associated_symptoms: list[str]
    concerns: str


class EncounterRecord(BaseModel):
    """A persisted encounter; created once, never updated."""

    id: str
    user_id: str
    thread_id: str
    data: EncounterData
    created_at: datetime = Field(default_factory=_utcnow)


# ── Patient profile ──────────────────────────────────────────────────


class PatientProfile(BaseModel):
    """Externally sourced patient profile; any field may be absent."""

    birth_date: Optional[date] = None
    gender: Optional[str] = None
    name: Optional[str] = None
    language: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or NAME_DISPLAY_DEFAULT

    @property
    def display_gender(self) -> str:
        return self.gender or NOT_AVAILABLE

    @property
    def display_language(self) -> str:
        return self.language or LANGUAGE_DISPLAY_DEFAULT


# ── Card data ────────────────────────────────────────────────────────


class StructuredCardData(BaseModel):
    """Bilingual card payload produced by enrichment (or its local fallback)."""

    cc_kor: Optional[str] = None
    cc_eng: Optional[str] = None
    hpi_kor: Optional[str] = None
    hpi_eng: Optional[str] = None
    pain_score: Union[int, float, str, None] = None
    allergies_kor: Optional[str] = None
    allergies_eng: Optional[str] = None
    suggested_dept_kor: Optional[str] = None
    suggested_dept_eng: Optional[str] = None
    is_emergency: Optional[bool] = None


STRUCTURED_CARD_FIELDS: frozenset[str] = frozenset(StructuredCardData.model_fields)


class RawCard(BaseModel):
    """Legacy card input: raw encounter fields, each possibly missing."""

    kind: Literal["raw"] = "raw"
    chief_complaint: Optional[str] = None
    symptom_onset: Optional[str] = None
    symptom_severity: Optional[str] = None
    associated_symptoms: list[str] = Field(default_factory=list)
    concerns: Optional[str] = None

    @classmethod
    def from_encounter(cls, data: EncounterData) -> RawCard:
        return cls(**data.model_dump())


class EnrichedCard(BaseModel):
    """Enriched card input wrapping ``StructuredCardData``."""

    kind: Literal["enriched"] = "enriched"
    data: StructuredCardData = Field(default_factory=StructuredCardData)


CardInput = Union[RawCard, EnrichedCard]


def coerce_card_input(value: Union[CardInput, EncounterData, StructuredCardData, Mapping[str, Any], None]) -> CardInput:
    """Normalize historical caller shapes into a ``CardInput``.

    Plain mappings are treated as enriched when they carry any
    ``StructuredCardData`` key, otherwise as raw encounter fields.
    """
    if isinstance(value, (RawCard, EnrichedCard)):
        return value
    if isinstance(value, EncounterData):
        return RawCard.from_encounter(value)
    if isinstance(value, StructuredCardData):
        return EnrichedCard(data=value)

    mapping = dict(value or {})
    if STRUCTURED_CARD_FIELDS & mapping.keys():
        known = {k: v for k, v in mapping.items() if k in STRUCTURED_CARD_FIELDS}
        return EnrichedCard(data=StructuredCardData(**known))

    symptoms = mapping.get("associated_symptoms") or []
    if isinstance(symptoms, str):
        symptoms = [symptoms]
    return RawCard(
        chief_complaint=_as_text(mapping.get("chief_complaint")),
        symptom_onset=_as_text(mapping.get("symptom_onset")),
        symptom_severity=_as_text(mapping.get("symptom_severity")),
        associated_symptoms=[str(s) for s in symptoms],
        concerns=_as_text(mapping.get("concerns")),
    )


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# ── Medical card metadata ────────────────────────────────────────────


class MedicalRecordMeta(BaseModel):
    """Metadata for a generated card; append-only."""

    id: str
    user_id: str
    encounter_id: str
    pdf_url: str
    status: Literal["active", "archived"] = "active"
    created_at: datetime = Field(default_factory=_utcnow)
