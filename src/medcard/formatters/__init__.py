"""Medical card formatters.

Usage::

    from medcard.formatters import CardFormatter

    pdf_bytes = CardFormatter().format(profile, card_input)
"""

from __future__ import annotations

from typing import Any

from medcard.formatters.protocols import ICardFormatter

__all__ = [
    "CardFormatter",
    "ICardFormatter",
]


def __getattr__(name: str) -> Any:
    """Lazy-load CardFormatter so reportlab is only imported when needed."""
    if name == "CardFormatter":
        from medcard.formatters.pdf_formatter import CardFormatter

        return CardFormatter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
