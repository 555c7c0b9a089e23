"""Card service: encounter -> (optional enrichment) -> PDF -> blob -> record."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from medcard.cards.enrichment import CardEnricher
from medcard.core.config import StorageConfig
from medcard.exceptions import InvalidRequest
from medcard.formatters.protocols import ICardFormatter
from medcard.models import CardInput, RawCard
from medcard.stores.blob_store import IBlobStore
from medcard.stores.record_store import RecordStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedCard:
    """Signed URL of the uploaded card and its metadata record id."""

    pdf_url: str
    record_id: str


def card_object_path(user_id: str, timestamp_ms: int) -> str:
    return f"{user_id}/medical-record-{user_id}-{timestamp_ms}.pdf"


class CardService:
    """Generates, stores and registers a patient's medical card.

    Steps run strictly in order and the metadata insert is the last write,
    so a failure at any step leaves no ``medical_records`` entry behind.
    """

    def __init__(
        self,
        records: RecordStore,
        blob_store: IBlobStore,
        formatter: ICardFormatter,
        enricher: Optional[CardEnricher] = None,
        storage: Optional[StorageConfig] = None,
    ) -> None:
        self._records = records
        self._blobs = blob_store
        self._formatter = formatter
        self._enricher = enricher
        self._ttl = (storage or StorageConfig()).signed_url_ttl_seconds

    async def generate(self, user_id: str, encounter_id: str) -> GeneratedCard:
        if not user_id or not encounter_id:
            raise InvalidRequest("user_id and encounter_id are required")

        # Store, render and upload steps block, so they run off the event loop.
        profile = await asyncio.to_thread(self._records.get_profile, user_id)
        encounter = await asyncio.to_thread(self._records.get_encounter, encounter_id)

        card: CardInput
        if self._enricher is not None:
            card = await self._enricher.enrich(encounter.data)
        else:
            card = RawCard.from_encounter(encounter.data)

        pdf_bytes = await asyncio.to_thread(self._formatter.format, profile, card)
        path = card_object_path(user_id, int(time.time() * 1000))
        pdf_url = await asyncio.to_thread(self._publish, path, pdf_bytes)

        meta = await asyncio.to_thread(self._records.insert_medical_record, user_id, encounter_id, pdf_url)
        log.info(
            "Medical card generated",
            extra={"user_id": user_id, "encounter_id": encounter_id, "record_id": meta.id, "bytes": len(pdf_bytes)},
        )
        return GeneratedCard(pdf_url=pdf_url, record_id=meta.id)

    def _publish(self, path: str, pdf_bytes: bytes) -> str:
        self._blobs.upload(path, pdf_bytes, self._formatter.content_type)
        return self._blobs.signed_url(path, self._ttl)
