"""Tool definitions offered to the model during intake."""

from __future__ import annotations

from typing import Any

from medcard.prompts import get_prompt

SAVE_ENCOUNTER = "save_encounter"


def save_encounter_tool() -> dict[str, Any]:
    """OpenAI-style function schema: exactly the five encounter fields, all required."""
    return {
        "type": "function",
        "function": {
            "name": SAVE_ENCOUNTER,
            "description": get_prompt("intake", "interview", "SAVE_ENCOUNTER_DESCRIPTION"),
            "parameters": {
                "type": "object",
                "properties": {
                    "chief_complaint": {"type": "string"},
                    "symptom_onset": {"type": "string"},
                    "symptom_severity": {"type": "string"},
                    "associated_symptoms": {"type": "array", "items": {"type": "string"}},
                    "concerns": {"type": "string"},
                },
                "required": [
                    "chief_complaint",
                    "symptom_onset",
                    "symptom_severity",
                    "associated_symptoms",
                    "concerns",
                ],
            },
        },
    }
