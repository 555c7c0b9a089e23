"""Persistence backend factory: resolves the backend from config."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from medcard.persistence.file_backend import FilePersistenceBackend
from medcard.persistence.memory_backend import MemoryPersistenceBackend
from medcard.persistence.protocols import IPersistenceBackend

if TYPE_CHECKING:
    from medcard.core.config import PersistenceConfig

log = logging.getLogger(__name__)


def create_persistence_backend(config: PersistenceConfig) -> IPersistenceBackend:
    """Build the record backend named by ``config.backend``."""
    log.info("Using %s persistence backend", config.backend)
    if config.backend == "memory":
        return MemoryPersistenceBackend()
    if config.backend == "s3":
        from medcard.persistence.s3_backend import S3PersistenceBackend

        return S3PersistenceBackend(
            bucket=config.s3_bucket,
            prefix=config.s3_prefix,
            region=config.aws_region,
        )
    return FilePersistenceBackend(base_path=config.store_path)
