"""Card data preparation: field helpers and model-driven enrichment."""

from __future__ import annotations

from medcard.cards.enrichment import CardEnricher, fallback_card, parse_structured_card
from medcard.cards.fields import compute_age, is_severe, join_symptoms, parse_severity, synthesize_narrative

__all__ = [
    "CardEnricher",
    "compute_age",
    "fallback_card",
    "is_severe",
    "join_symptoms",
    "parse_severity",
    "parse_structured_card",
    "synthesize_narrative",
]
