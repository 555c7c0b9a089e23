"""Application services orchestrating stores, gateway and formatters."""

from __future__ import annotations

from medcard.services.card_service import CardService, GeneratedCard, card_object_path

__all__ = ["CardService", "GeneratedCard", "card_object_path"]
