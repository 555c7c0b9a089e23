"""Prompt registry backed by packaged template modules.

Usage::

    prompt = get_prompt("intake", "interview", "INTAKE_SYSTEM_PROMPT")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from medcard.prompts.backends.file_backend import FilePromptBackend

if TYPE_CHECKING:
    from medcard.core.config import IntakeConfig

logger = logging.getLogger(__name__)

_backend = FilePromptBackend()


def get_prompt(domain: str, category: str, name: str) -> str:
    """Look up a prompt template by domain, category, and name.

    Raises:
        KeyError: If the prompt is not found.
    """
    return _backend.get(domain, category, name)


def load_system_prompt(config: IntakeConfig) -> str:
    """Resolve the intake interview script once at startup.

    An operator-supplied file in ``system_prompt_path`` replaces the
    packaged script verbatim.
    """
    if config.system_prompt_path is not None:
        logger.info("Loading intake system prompt from %s", config.system_prompt_path)
        return config.system_prompt_path.read_text(encoding="utf-8")
    return get_prompt("intake", "interview", "INTAKE_SYSTEM_PROMPT")
