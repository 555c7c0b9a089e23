"""Pure helpers shared by enrichment and the card composer."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional, Sequence, Union

NONE_PLACEHOLDER = "None"
EMERGENCY_SEVERITY_THRESHOLD = 7.0

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def compute_age(birth_date: Optional[date], today: date) -> Optional[int]:
    """Whole years elapsed since ``birth_date`` as of ``today``.

    >>> compute_age(date(2000, 6, 15), date(2024, 6, 14))
    23
    """
    if birth_date is None:
        return None
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def parse_severity(value: Union[str, int, float, None]) -> Optional[float]:
    """First number found in a severity answer (``"8/10"`` -> 8.0), else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.search(value)
    return float(match.group()) if match else None


def is_severe(value: Union[str, int, float, None]) -> bool:
    severity = parse_severity(value)
    return severity is not None and severity > EMERGENCY_SEVERITY_THRESHOLD


def describe_severity(value: Union[str, int, float, None], placeholder: str = "N/A") -> str:
    """Numeric answers read ``"8/10"``; anything unparseable is kept verbatim."""
    score = parse_severity(value)
    if score is not None:
        return f"{score:g}/10"
    text = str(value).strip() if value is not None else ""
    return text or placeholder


def join_symptoms(symptoms: Optional[Sequence[str]]) -> str:
    """``["fever", "cough"]`` -> ``"fever, cough"``; empty -> ``"None"``."""
    cleaned = [s.strip() for s in symptoms or [] if s and s.strip()]
    return ", ".join(cleaned) if cleaned else NONE_PLACEHOLDER


def synthesize_narrative(
    *,
    chief_complaint: Optional[str],
    symptom_onset: Optional[str],
    symptom_severity: Optional[str],
    associated_symptoms: Optional[Sequence[str]],
    concerns: Optional[str],
    placeholder: str = "N/A",
) -> str:
    """Single HPI paragraph: onset, complaint, severity, symptoms, concerns, in that order."""
    return (
        f"Onset: {symptom_onset or placeholder}. "
        f"Chief complaint: {chief_complaint or placeholder}. "
        f"Severity: {describe_severity(symptom_severity, placeholder)}. "
        f"Associated symptoms: {join_symptoms(associated_symptoms)}. "
        f"Concerns: {concerns or placeholder}."
    )
