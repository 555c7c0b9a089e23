"""Process-local record backend for tests and ``MEDCARD_PERSISTENCE_BACKEND=memory``."""

from __future__ import annotations

import bisect
import logging

log = logging.getLogger(__name__)


class MemoryPersistenceBackend:
    """Keeps intake documents in a dict, with a sorted key index for prefix scans.

    Everything is lost on restart.
    """

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}
        self._keys: list[str] = []

    def save(self, key: str, data: str) -> None:
        if key not in self._documents:
            bisect.insort(self._keys, key)
        self._documents[key] = data
        log.debug("Stored %s (%d bytes) in memory", key, len(data))

    def load(self, key: str) -> str:
        try:
            return self._documents[key]
        except KeyError:
            raise KeyError(f"No document at {key!r} in memory store") from None

    def list_keys(self, prefix: str = "") -> list[str]:
        start = bisect.bisect_left(self._keys, prefix)
        keys = []
        for key in self._keys[start:]:
            if not key.startswith(prefix):
                break
            keys.append(key)
        return keys
