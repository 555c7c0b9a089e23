"""Tests for card input normalization and profile display defaults."""

from __future__ import annotations

from medcard.models import (
    EncounterData,
    EnrichedCard,
    PatientProfile,
    RawCard,
    StructuredCardData,
    coerce_card_input,
)


class TestCoerceCardInput:
    def test_card_inputs_pass_through(self) -> None:
        raw = RawCard(chief_complaint="x")
        assert coerce_card_input(raw) is raw

    def test_encounter_becomes_raw(self, sample_encounter: EncounterData) -> None:
        card = coerce_card_input(sample_encounter)
        assert isinstance(card, RawCard)
        assert card.associated_symptoms == ["fever", "cough"]

    def test_structured_becomes_enriched(self) -> None:
        card = coerce_card_input(StructuredCardData(cc_eng="Headache"))
        assert isinstance(card, EnrichedCard)

    def test_mapping_with_structured_key_is_enriched(self) -> None:
        card = coerce_card_input({"hpi_eng": "story", "chief_complaint": "ignored"})
        assert isinstance(card, EnrichedCard)
        assert card.data.hpi_eng == "story"

    def test_plain_mapping_is_raw(self) -> None:
        card = coerce_card_input({"chief_complaint": "headache", "symptom_severity": 8, "associated_symptoms": "fever"})
        assert isinstance(card, RawCard)
        assert card.symptom_severity == "8"
        assert card.associated_symptoms == ["fever"]

    def test_empty_and_none(self) -> None:
        assert coerce_card_input({}) == RawCard()
        assert coerce_card_input(None) == RawCard()


class TestPatientProfileDisplay:
    def test_defaults(self) -> None:
        profile = PatientProfile()
        assert profile.display_name == "이름 없음"
        assert profile.display_gender == "N/A"
        assert profile.display_language == "English"

    def test_birth_date_parsed_from_iso(self) -> None:
        assert PatientProfile.model_validate({"birth_date": "1990-01-31"}).birth_date.day == 31
