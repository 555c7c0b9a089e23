"""File-based record backend: one JSON document per key on the local filesystem."""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


def _segments(key: str) -> list[str]:
    """Path segments of ``key`` with empty, ``.`` and ``..`` parts dropped."""
    return [p for p in key.replace("\\", "/").split("/") if p not in ("", ".", "..")]


class FilePersistenceBackend:
    """Stores each key as ``<base>/<key>.json``, mirroring ``/`` as directories.

    Prefix listings only walk the directory the prefix names, so a history
    fetch for one thread never scans other users' documents.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        parts = _segments(key)
        if not parts:
            raise KeyError(f"Invalid key: {key!r}")
        path = self._base.joinpath(*parts)
        return path.with_name(f"{path.name}.json")

    def save(self, key: str, data: str) -> None:
        path = self._key_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")
        log.debug("Saved %s to %s", key, path)

    def load(self, key: str) -> str:
        path = self._key_path(key)
        if not path.is_file():
            raise KeyError(f"Not found: {key} (path: {path})")
        return path.read_text(encoding="utf-8")

    def list_keys(self, prefix: str = "") -> list[str]:
        # Everything before the last "/" is a directory; the rest filters names.
        directory = prefix.rpartition("/")[0]
        root = self._base.joinpath(*_segments(directory))
        if not root.is_dir():
            return []
        keys = []
        for path in root.rglob("*.json"):
            key = path.relative_to(self._base).with_suffix("").as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)
