"""Gateway backend factory: resolves the backend from config."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from medcard.inference.protocols import IInferenceBackend
from medcard.inference.realtime import RealTimeBackend

if TYPE_CHECKING:
    from medcard.core.config import AppSettings

log = logging.getLogger(__name__)

_KEYLESS_PROVIDERS = frozenset({"bedrock", "ollama"})


def create_inference_backend(settings: AppSettings) -> IInferenceBackend:
    """Create the litellm-backed gateway configured by ``settings.llm``."""
    llm = settings.llm
    api_key = None if llm.provider in _KEYLESS_PROVIDERS else llm.api_key
    log.info("Using RealTimeBackend", extra={"provider": llm.provider, "chat_model": llm.chat_model})
    return RealTimeBackend(api_key=api_key, base_url=llm.base_url, timeout=llm.timeout)
