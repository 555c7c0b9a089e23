"""Record backend protocol shared by the conversation and record stores."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPersistenceBackend(Protocol):
    """Key/value store for intake documents.

    Keys are ``/``-separated paths grouped by collection::

        chat/<user>/<thread>/<stamp>-<seq>    one conversation turn
        encounters/<id>                       extracted EncounterRecord
        profiles/<user_id>                    PatientProfile
        medical_records/<id>                  MedicalRecordMeta

    Values are the JSON documents of those models. Stores never update or
    remove a document once written, so the contract is write, read and
    list only.
    """

    def save(self, key: str, data: str) -> None:
        """Write ``data`` under ``key``."""
        ...

    def load(self, key: str) -> str:
        """Read the document at ``key``. Raises KeyError if absent."""
        ...

    def list_keys(self, prefix: str = "") -> list[str]:
        """Keys starting with ``prefix``, sorted ascending.

        Conversation history relies on this order: turn keys embed a UTC
        stamp, so ascending order is chronological.
        """
        ...
