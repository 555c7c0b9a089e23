"""Conversation store: ordered role/content turns keyed by (user, thread)."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from typing import Literal
from urllib.parse import quote

from pydantic import ValidationError

from medcard.exceptions import UpstreamStoreError
from medcard.models import ChatTurn
from medcard.persistence.protocols import IPersistenceBackend

log = logging.getLogger(__name__)

_seq = itertools.count()


def _segment(value: str) -> str:
    """Percent-encode an id into a single key segment (no ``/``, no dot-only names)."""
    return quote(value, safe="").replace(".", "%2E")


def _thread_prefix(user_id: str, thread_id: str) -> str:
    return f"chat/{_segment(user_id)}/{_segment(thread_id)}/"


class ConversationStore:
    """Append-only turn log.

    Turn keys are ``chat/{user}/{thread}/{utc timestamp}-{seq}`` with both ids
    percent-encoded, so lexical key order is chronological order and one
    thread never lists another thread's turns.
    """

    def __init__(self, backend: IPersistenceBackend) -> None:
        self._backend = backend

    def recent(self, user_id: str, thread_id: str, limit: int = 20) -> list[ChatTurn]:
        """Return the ``limit`` most recent turns, oldest first."""
        if limit <= 0:
            return []
        try:
            keys = self._backend.list_keys(_thread_prefix(user_id, thread_id))
            return [ChatTurn.model_validate_json(self._backend.load(k)) for k in keys[-limit:]]
        except (KeyError, ValidationError) as e:
            raise UpstreamStoreError(f"Conversation history is unreadable: {e}") from e
        except Exception as e:
            log.error("History fetch failed", extra={"user_id": user_id, "thread_id": thread_id})
            raise UpstreamStoreError(f"History fetch failed: {e}") from e

    def append(
        self,
        user_id: str,
        thread_id: str,
        role: Literal["system", "user", "assistant"],
        content: str,
    ) -> ChatTurn:
        turn = ChatTurn(role=role, content=content, timestamp=datetime.now(timezone.utc))
        stamp = turn.timestamp.strftime("%Y%m%d%H%M%S%f")
        key = f"{_thread_prefix(user_id, thread_id)}{stamp}-{next(_seq):08d}"
        try:
            self._backend.save(key, turn.model_dump_json())
        except Exception as e:
            log.error("Turn append failed", extra={"user_id": user_id, "thread_id": thread_id})
            raise UpstreamStoreError(f"Turn append failed: {e}") from e
        return turn
