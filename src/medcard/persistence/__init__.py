"""Pluggable persistence backends for intake records."""

from __future__ import annotations

from medcard.persistence.factory import create_persistence_backend
from medcard.persistence.file_backend import FilePersistenceBackend
from medcard.persistence.memory_backend import MemoryPersistenceBackend
from medcard.persistence.protocols import IPersistenceBackend

__all__ = [
    "IPersistenceBackend",
    "FilePersistenceBackend",
    "MemoryPersistenceBackend",
    "create_persistence_backend",
]
