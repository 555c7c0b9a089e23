"""File-based prompt backend: loads ``_PROMPT_DATA`` from template modules.

Module path convention: ``medcard.prompts.templates.{domain}.{category}``.
"""

from __future__ import annotations

import importlib
from typing import Any


class FilePromptBackend:
    """Loads prompts from Python modules on disk via importlib."""

    def __init__(self) -> None:
        self._modules: dict[tuple[str, str], Any] = {}

    def get(self, domain: str, category: str, name: str) -> str:
        """Load a prompt from ``_PROMPT_DATA`` in ``prompts/templates/{domain}/{category}.py``."""
        key = (domain, category)
        if key not in self._modules:
            module_path = f"medcard.prompts.templates.{domain}.{category}"
            try:
                self._modules[key] = importlib.import_module(module_path)
            except ModuleNotFoundError as exc:
                raise KeyError(f"Prompt module not found: {module_path}") from exc

        module = self._modules[key]
        data: dict[str, str] | None = getattr(module, "_PROMPT_DATA", None)
        if data is not None and name in data:
            return data[name]

        raise KeyError(f"Prompt {name!r} not found in {domain}/{category}")
