"""Fake bulk vendor — records sent batches for testing."""

from uuid import uuid4

from dispatcher.bulk.payload import BulkMessagePayload
from dispatcher.bulk.vendor_port import BulkVendor, VendorResult


class FakeBulkVendor(BulkVendor):
    """Bulk vendor that records payloads in memory for test assertions."""

    def __init__(self, channel: str = "Email"):
        self.channel = channel
        self.sent_batches: list[list[BulkMessagePayload]] = []
        self.should_succeed = True
        self.failure_reason = "Vendor rejected message"
        self.raise_error: Exception | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Vendor rejected message",
        raise_error: Exception | None = None,
    ):
        """Configure the fake vendor behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    async def send_batch(self, payloads: list[BulkMessagePayload]) -> list[VendorResult]:
        if self.raise_error is not None:
            raise self.raise_error

        self.sent_batches.append(list(payloads))

        if not self.should_succeed:
            return [
                VendorResult(payload_id=str(p.id), success=False, failure_reason=self.failure_reason)
                for p in payloads
            ]
        return [
            VendorResult(payload_id=str(p.id), success=True, vendor_message_id=f"bulk-{uuid4().hex[:12]}")
            for p in payloads
        ]

    def reset(self):
        """Clear sent batches (useful between tests)."""
        self.sent_batches.clear()
        self.configure()
