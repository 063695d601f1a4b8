"""Bulk vendor port (abstract interface).

A bulk vendor accepts a batch of queued payloads and reports, per payload,
whether the send went through. Every reported result is final from the
dispatcher's point of view: the payload is deleted and the outcome is
recorded against the invitation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from dispatcher.bulk.payload import BulkMessagePayload


@dataclass(frozen=True)
class VendorResult:
    """Outcome of sending one payload."""

    payload_id: str
    success: bool
    vendor_message_id: str | None = None
    failure_reason: str | None = None


class BulkVendor(ABC):
    """Abstract bulk vendor interface."""

    channel: str = "Email"

    @abstractmethod
    async def send_batch(self, payloads: list[BulkMessagePayload]) -> list[VendorResult]:
        """Send a batch of payloads. Payloads missing from the result stay claimed."""
        ...
