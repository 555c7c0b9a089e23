"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from medcard.core.config import AppSettings

log = logging.getLogger(__name__)

# Providers that use IAM/local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"bedrock", "ollama"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_api_key(settings)
    _check_persistence(settings)
    _check_storage(settings)
    _check_system_prompt(settings)


def _check_api_key(settings: AppSettings) -> None:
    """Reject placeholder API keys for providers that need real ones."""
    if settings.llm.provider not in _NO_KEY_PROVIDERS:
        if settings.llm.api_key in ("no-key", ""):
            raise ValueError(
                f"MEDCARD_LLM_API_KEY is required for provider '{settings.llm.provider}'. "
                f"Set it via environment variable or secrets manager."
            )


def _check_persistence(settings: AppSettings) -> None:
    """Require a bucket for S3 persistence; warn about file persistence in containers."""
    if settings.persistence.backend == "s3" and not settings.persistence.s3_bucket:
        raise ValueError("MEDCARD_PERSISTENCE_BACKEND=s3 requires MEDCARD_PERSISTENCE_S3_BUCKET.")

    is_container = bool(
        os.environ.get("ECS_CONTAINER_METADATA_URI")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
    )
    if is_container and settings.persistence.backend == "file":
        log.warning(
            "MEDCARD_PERSISTENCE_BACKEND=file in a container environment. "
            "Encounters will be lost on container restart. Consider MEDCARD_PERSISTENCE_BACKEND=s3."
        )


def _check_storage(settings: AppSettings) -> None:
    if settings.storage.backend == "s3" and not settings.storage.bucket:
        raise ValueError("MEDCARD_STORAGE_BACKEND=s3 requires MEDCARD_STORAGE_BUCKET.")
    if settings.storage.backend == "memory":
        log.warning("MEDCARD_STORAGE_BACKEND=memory: signed card URLs are not externally reachable.")


def _check_system_prompt(settings: AppSettings) -> None:
    path = settings.intake.system_prompt_path
    if path is not None and not path.is_file():
        raise ValueError(f"MEDCARD_INTAKE_SYSTEM_PROMPT_PATH does not point to a file: {path}")
