"""Record store: encounters, patient profiles and medical card metadata."""

from __future__ import annotations

import logging
import uuid
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from medcard.exceptions import RecordNotFoundError, UpstreamStoreError
from medcard.models import EncounterData, EncounterRecord, MedicalRecordMeta, PatientProfile
from medcard.persistence.protocols import IPersistenceBackend

log = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class RecordStore:
    """Keyed insert / lookup over a persistence backend.

    Layout::

        encounters/{id}
        profiles/{user_id}
        medical_records/{id}
    """

    def __init__(self, backend: IPersistenceBackend) -> None:
        self._backend = backend

    # ── Encounters ───────────────────────────────────────────────────

    def insert_encounter(self, user_id: str, thread_id: str, data: EncounterData) -> EncounterRecord:
        record = EncounterRecord(id=uuid.uuid4().hex, user_id=user_id, thread_id=thread_id, data=data)
        self._save(f"encounters/{record.id}", record)
        log.info("Encounter saved", extra={"encounter_id": record.id, "user_id": user_id})
        return record

    def get_encounter(self, encounter_id: str) -> EncounterRecord:
        return self._load(f"encounters/{encounter_id}", EncounterRecord, "Encounter")

    # ── Profiles ─────────────────────────────────────────────────────

    def get_profile(self, user_id: str) -> PatientProfile:
        return self._load(f"profiles/{user_id}", PatientProfile, "Profile")

    def put_profile(self, user_id: str, profile: PatientProfile) -> None:
        self._save(f"profiles/{user_id}", profile)

    # ── Medical card metadata ────────────────────────────────────────

    def insert_medical_record(
        self,
        user_id: str,
        encounter_id: str,
        pdf_url: str,
        status: str = "active",
    ) -> MedicalRecordMeta:
        meta = MedicalRecordMeta(
            id=uuid.uuid4().hex,
            user_id=user_id,
            encounter_id=encounter_id,
            pdf_url=pdf_url,
            status=status,
        )
        self._save(f"medical_records/{meta.id}", meta)
        log.info("Medical record saved", extra={"record_id": meta.id, "encounter_id": encounter_id})
        return meta

    def get_medical_record(self, record_id: str) -> MedicalRecordMeta:
        return self._load(f"medical_records/{record_id}", MedicalRecordMeta, "Medical record")

    # ── Internals ────────────────────────────────────────────────────

    def _save(self, key: str, model: BaseModel) -> None:
        try:
            self._backend.save(key, model.model_dump_json())
        except Exception as e:
            log.error("Record write failed", extra={"key": key})
            raise UpstreamStoreError(f"Failed to write {key}: {e}") from e

    def _load(self, key: str, model: type[_M], label: str) -> _M:
        try:
            raw = self._backend.load(key)
        except KeyError as e:
            raise RecordNotFoundError(f"{label} not found: {key.rsplit('/', 1)[-1]}") from e
        except Exception as e:
            log.error("Record read failed", extra={"key": key})
            raise UpstreamStoreError(f"Failed to read {key}: {e}") from e
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            raise UpstreamStoreError(f"{label} record is malformed: {key}") from e
