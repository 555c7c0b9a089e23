"""Intake conversation: tool schema and extraction protocol."""

from __future__ import annotations

from medcard.intake.service import IntakeOutcome, IntakeService, parse_encounter_arguments
from medcard.intake.tools import SAVE_ENCOUNTER, save_encounter_tool

__all__ = [
    "IntakeOutcome",
    "IntakeService",
    "SAVE_ENCOUNTER",
    "parse_encounter_arguments",
    "save_encounter_tool",
]
