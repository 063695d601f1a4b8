"""Log flush pipeline — batches processing outcomes into the event log.

flush_batch() turns a batch of MessagePayloads into at most two storage
calls:

1. one insert_many with every payload's log events that pass the severity
   filter;
2. one bulk_write with one UpdateOne per payload that carries invitation
   sub-events, pushing them (in order) onto the parent invitation's
   ``events`` list and bumping its ``updated`` timestamp.

A payload with sub-events but no invitation id is skipped and reported; the
rest of the batch is still written.

Empty writes are skipped in both flush_batch() and flush_single(); an empty
batch therefore costs no storage calls at all.

The pipeline logs its own failures. A failed flush_batch() becomes an
internal-error LogEvent that is written through report_exception(). If that
write fails as well, the new failure is reported in turn, up to
``settings.max_self_log_attempts`` attempts. After that the event goes to
the structlog fallback sink and is dropped from the event log.
"""

from datetime import UTC, datetime

import structlog
from dispatcher.config import DispatcherSettings
from dispatcher.logevent.factory import build_log_event
from dispatcher.logevent.logevent import LogEvent
from dispatcher.logevent.messages import internal_exception
from dispatcher.logevent.severity import is_insertible
from dispatcher.message.payload import MessagePayload
from dispatcher.store.port import DocumentStore, UpdateOne

logger = structlog.get_logger(__name__)


class LogFlushPipeline:
    """Writes LogEvents and invitation sub-events to the event log collection."""

    def __init__(self, store: DocumentStore, settings: DispatcherSettings) -> None:
        self.store = store
        self.settings = settings

    @property
    def collection(self) -> str:
        return self.settings.log_event_collection

    def insertible_documents(self, events: list[LogEvent]) -> list[dict]:
        """Render the events that pass the configured severity threshold."""
        return [
            event.to_document()
            for event in events
            if is_insertible(event.log_message, self.settings.log_level)
        ]

    async def flush_batch(self, payloads: list[MessagePayload]) -> None:
        """Persist the log events and invitation sub-events of a batch.

        Never raises: failures are reported to the event log instead.
        """
        try:
            documents = []
            for payload in payloads:
                documents.extend(self.insertible_documents(payload.log_events))

            now = datetime.now(UTC)
            operations = []
            orphaned = 0
            for payload in payloads:
                if not payload.invitation_log_events:
                    continue
                if not payload.invitation_id:
                    orphaned += 1
                    continue
                operations.append(
                    UpdateOne(
                        filter={"id": payload.invitation_id},
                        set={"updated": now},
                        push={"events": [event.to_document() for event in payload.invitation_log_events]},
                    )
                )

            if documents:
                await self.store.insert_many(self.collection, documents)
            if operations:
                await self.store.bulk_write(self.collection, operations)

            logger.debug(
                "Log batch flushed",
                payloads=len(payloads),
                log_events=len(documents),
                invitation_updates=len(operations),
            )
            if orphaned:
                logger.error("Invitation sub-events without a parent invitation id", payloads=orphaned)
                await self.report_exception(
                    ValueError(f"Invitation sub-events were recorded without a parent invitation id ({orphaned} payloads)")
                )
        except Exception as e:
            logger.error("Log batch flush failed", payloads=len(payloads), error=str(e))
            await self.report_exception(e)

    async def flush_single(self, events: list[LogEvent]) -> None:
        """Insert the given events that pass the severity filter.

        Storage errors propagate; callers that must not fail go through
        report_exception().
        """
        documents = self.insertible_documents(events)
        if not documents:
            return
        await self.store.insert_many(self.collection, documents)

    async def report_exception(self, exc: BaseException) -> None:
        """Record an internal failure in the event log. Never raises."""
        failure = exc
        document = None

        for attempt in range(1, self.settings.max_self_log_attempts + 1):
            try:
                event = build_log_event(None, internal_exception(failure))
                document = event.to_document()
                await self.flush_single([event])
                return
            except Exception as e:
                logger.warning(
                    "Internal error event could not be written",
                    attempt=attempt,
                    max_attempts=self.settings.max_self_log_attempts,
                    error=str(e),
                )
                failure = e

        # Fallback sink: the event log is unreachable, keep the record in the process logs
        logger.critical(
            "Internal error dropped from event log",
            original_error=f"{type(exc).__name__}: {exc}",
            last_error=f"{type(failure).__name__}: {failure}",
            log_event=document,
        )
