"""Card formatter protocol: the contract the card service renders through."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from medcard.models import PatientProfile


@runtime_checkable
class ICardFormatter(Protocol):
    """Protocol for card formatters.

    ``card_data`` accepts anything :func:`medcard.models.coerce_card_input`
    understands; implementations dispatch once on the normalized shape.
    """

    def format(
        self,
        profile: Union[PatientProfile, Mapping[str, Any], None],
        card_data: Any,
        *,
        today: Optional[date] = None,
    ) -> bytes:
        """Render the card into output bytes."""
        ...

    def format_to_file(
        self,
        profile: Union[PatientProfile, Mapping[str, Any], None],
        card_data: Any,
        path: Path,
        *,
        today: Optional[date] = None,
    ) -> Path:
        """Render and write to a file. Returns the output path."""
        ...

    @property
    def content_type(self) -> str:
        """MIME type for the output format (e.g. 'application/pdf')."""
        ...


__all__ = ["ICardFormatter"]
