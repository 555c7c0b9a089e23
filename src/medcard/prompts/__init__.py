"""Prompt management: registry and packaged templates."""

from __future__ import annotations

from medcard.prompts.registry import get_prompt, load_system_prompt

__all__ = ["get_prompt", "load_system_prompt"]
