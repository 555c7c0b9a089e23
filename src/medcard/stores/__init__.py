"""Conversation, record and blob stores."""

from __future__ import annotations

from medcard.stores.blob_store import IBlobStore, MemoryBlobStore, S3BlobStore, create_blob_store
from medcard.stores.conversation_store import ConversationStore
from medcard.stores.record_store import RecordStore

__all__ = [
    "ConversationStore",
    "IBlobStore",
    "MemoryBlobStore",
    "RecordStore",
    "S3BlobStore",
    "create_blob_store",
]
