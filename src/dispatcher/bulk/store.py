"""Bulk payload store — the queue of messages waiting for the bulk vendor.

Every operation reports its failures through the log flush pipeline and
returns normally, so a store outage looks like "nothing to do" to callers.
An empty result from read_batch() or claim_batch() can therefore mean either
that nothing is pending or that the read failed; the event log tells which.

read_batch() followed by mark_processing() is not atomic: two pollers for
the same vendor can read the same READY documents before either marks them.
claim_batch() claims documents one find-and-modify at a time instead, so a
document is handed to exactly one poller.
"""

import structlog
from dispatcher.bulk.payload import BulkMessagePayload, PayloadStatus, statuses_leading_to
from dispatcher.config import DispatcherSettings
from dispatcher.logevent.flush import LogFlushPipeline
from dispatcher.logevent.messages import bulk_payload_queued
from dispatcher.message.payload import MessagePayload
from dispatcher.store.port import DocumentStore

logger = structlog.get_logger(__name__)


class BulkPayloadStore:
    def __init__(
        self,
        store: DocumentStore,
        settings: DispatcherSettings,
        pipeline: LogFlushPipeline,
    ) -> None:
        self.store = store
        self.settings = settings
        self.pipeline = pipeline

    @property
    def collection(self) -> str:
        return self.settings.bulk_payload_collection

    def _ready_filter(self) -> dict:
        return {
            "bulk_vendor_name": self.settings.normalized_vendor_name,
            "status": PayloadStatus.READY.value,
        }

    async def insert(self, payload: MessagePayload) -> BulkMessagePayload | None:
        """Queue a processed message for its bulk vendor in READY status."""
        try:
            bulk_payload = BulkMessagePayload.create(payload)
            await self.store.insert_many(self.collection, [bulk_payload.to_document()])
        except Exception as e:
            logger.error("Failed to queue bulk message payload", error=str(e))
            await self.pipeline.report_exception(e)
            return None

        payload.log(bulk_payload_queued(bulk_payload.bulk_vendor_name))
        return bulk_payload

    async def read_batch(self) -> list[BulkMessagePayload]:
        """Return up to ``bulk_read_size`` READY payloads for the configured vendor.

        Reading does not claim; see mark_processing() and claim_batch().
        """
        try:
            documents = await self.store.find(
                self.collection,
                self._ready_filter(),
                limit=self.settings.bulk_read_size,
            )
            return [BulkMessagePayload.from_document(doc) for doc in documents]
        except Exception as e:
            logger.error("Failed to read bulk message payloads", error=str(e))
            await self.pipeline.report_exception(e)
            return []

    async def mark_processing(self, payloads: list[BulkMessagePayload]) -> int:
        """Move previously read payloads from READY to PROCESSING.

        Payloads that are already PROCESSING are left untouched, so repeating
        the call has no further effect. Returns the number of documents the
        store actually moved.

        The status of the given aggregates is updated optimistically: a payload
        another poller moved first still reads PROCESSING here. A short count
        is logged; callers that need exclusive ownership use claim_batch().
        """
        if not payloads:
            return 0

        try:
            modified = await self.store.update_many(
                self.collection,
                {
                    "id": {"$in": [str(payload.id) for payload in payloads]},
                    "status": {"$in": statuses_leading_to(PayloadStatus.PROCESSING)},
                },
                {"status": PayloadStatus.PROCESSING.value},
            )
            ready = [payload for payload in payloads if payload.status == PayloadStatus.READY.value]
            if modified < len(ready):
                logger.warning(
                    "Some bulk message payloads were already claimed",
                    requested=len(ready),
                    modified=modified,
                )
            for payload in ready:
                payload.mark_processing()
            return modified
        except Exception as e:
            logger.error("Failed to mark bulk message payloads as processing", error=str(e))
            await self.pipeline.report_exception(e)
            return 0

    async def claim_batch(self) -> list[BulkMessagePayload]:
        """Atomically claim up to ``bulk_read_size`` READY payloads for this poller."""
        claimed = []
        try:
            while len(claimed) < self.settings.bulk_read_size:
                document = await self.store.find_one_and_update(
                    self.collection,
                    self._ready_filter(),
                    {"status": PayloadStatus.PROCESSING.value},
                )
                if document is None:
                    break
                claimed.append(BulkMessagePayload.from_document(document))
        except Exception as e:
            logger.error(
                "Failed to claim bulk message payloads",
                claimed=len(claimed),
                error=str(e),
            )
            await self.pipeline.report_exception(e)

        return claimed

    async def delete(self, payloads: list[BulkMessagePayload]) -> None:
        """Remove payloads whose send the vendor has confirmed."""
        if not payloads:
            return

        try:
            await self.store.delete_many(
                self.collection,
                {"id": {"$in": [str(payload.id) for payload in payloads]}},
            )
        except Exception as e:
            logger.error("Failed to delete bulk message payloads", error=str(e))
            await self.pipeline.report_exception(e)
