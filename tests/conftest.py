"""Shared fixtures for medcard tests."""

from __future__ import annotations

from datetime import date

import pytest

from medcard.models import EncounterData, PatientProfile, StructuredCardData
from medcard.persistence.memory_backend import MemoryPersistenceBackend
from medcard.stores.conversation_store import ConversationStore
from medcard.stores.record_store import RecordStore


@pytest.fixture
def backend() -> MemoryPersistenceBackend:
    return MemoryPersistenceBackend()


@pytest.fixture
def conversations(backend: MemoryPersistenceBackend) -> ConversationStore:
    return ConversationStore(backend)


@pytest.fixture
def records(backend: MemoryPersistenceBackend) -> RecordStore:
    return RecordStore(backend)


@pytest.fixture
def sample_encounter() -> EncounterData:
    """Headache intake as the model would save it."""
    return EncounterData(
        chief_complaint="headache",
        symptom_onset="2 days ago",
        symptom_severity="8",
        associated_symptoms=["fever", "cough"],
        concerns="Worried it might be meningitis",
    )


@pytest.fixture
def sample_profile() -> PatientProfile:
    return PatientProfile(
        name="Jane Doe",
        birth_date=date(2000, 6, 15),
        gender="Female",
        language="English",
    )


@pytest.fixture
def sample_structured() -> StructuredCardData:
    return StructuredCardData(
        cc_kor="두통",
        cc_eng="Headache",
        hpi_kor="2일 전부터 시작된 두통, 발열과 기침 동반.",
        hpi_eng="Headache for two days with fever and cough.",
        pain_score=8,
        allergies_kor="없음",
        allergies_eng="None",
        suggested_dept_kor="신경과",
        suggested_dept_eng="Neurology",
        is_emergency=True,
    )
