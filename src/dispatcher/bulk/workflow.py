"""Bulk send workflow — feeds queued payloads to the bulk vendor.

One run claims a batch of READY payloads for the configured vendor, sends
them, deletes every payload the vendor reported on and records each outcome
in the event log (an application-level event plus an invitation-journey
sub-event on the payload's invitation, when it has one).

If the vendor call itself fails, the failure is reported and the claimed
payloads stay in PROCESSING. Nothing here moves them back to READY.
"""

import structlog
from dispatcher.bulk.payload import BulkMessagePayload
from dispatcher.bulk.store import BulkPayloadStore
from dispatcher.bulk.vendor_port import BulkVendor, VendorResult
from dispatcher.logevent.flush import LogFlushPipeline
from dispatcher.logevent.logevent import EventAction, EventChannel
from dispatcher.logevent.messages import dispatch_successful, dispatch_unsuccessful
from dispatcher.message.payload import MessagePayload
from dispatcher.utils.logging import bind_batch_context, clear_context

logger = structlog.get_logger(__name__)


class BulkSendWorkflow:
    def __init__(
        self,
        bulk_store: BulkPayloadStore,
        vendor: BulkVendor,
        pipeline: LogFlushPipeline,
    ) -> None:
        self.bulk_store = bulk_store
        self.vendor = vendor
        self.pipeline = pipeline

    async def run_once(self) -> int:
        """Process one batch. Returns the number of payloads claimed."""
        payloads = await self.bulk_store.claim_batch()
        if not payloads:
            return 0

        bind_batch_context(bulk_vendor=payloads[0].bulk_vendor_name)
        try:
            try:
                results = await self.vendor.send_batch(payloads)
            except Exception as e:
                logger.error("Bulk vendor send failed", payloads=len(payloads), error=str(e))
                await self.pipeline.report_exception(e)
                return len(payloads)

            by_id = {str(payload.id): payload for payload in payloads}
            completed = []
            outcomes = []
            for result in results:
                payload = by_id.get(result.payload_id)
                if payload is None:
                    logger.warning("Vendor reported an unknown payload", payload_id=result.payload_id)
                    continue
                completed.append(payload)
                outcomes.append(self._record_outcome(payload, result))

            await self.bulk_store.delete(completed)
            await self.pipeline.flush_batch(outcomes)

            logger.info(
                "Bulk batch processed",
                claimed=len(payloads),
                completed=len(completed),
                failed=sum(1 for result in results if not result.success),
            )
            return len(payloads)
        finally:
            clear_context()

    def _record_outcome(self, payload: BulkMessagePayload, result: VendorResult) -> MessagePayload:
        channel = EventChannel(self.vendor.channel)
        outcome = MessagePayload(
            queue_message=payload.queue_message(),
            invitation_id=payload.invitation_id,
            vendor_name=payload.bulk_vendor_name,
        )

        if result.success:
            log_message = dispatch_successful(channel.value, payload.bulk_vendor_name)
            action = EventAction.DISPATCH_SUCCESSFUL
        else:
            log_message = dispatch_unsuccessful(channel.value, result.failure_reason, payload.bulk_vendor_name)
            action = EventAction.DISPATCH_UNSUCCESSFUL

        outcome.log(log_message)
        if payload.invitation_id:
            outcome.track(action, channel, log_message)
        return outcome
