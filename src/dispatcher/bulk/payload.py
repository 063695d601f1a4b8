"""BulkMessagePayload aggregate — one outbound message queued for a bulk vendor.

State Machine:
    READY → PROCESSING → (deleted)

Payloads are created READY by the dispatch pipeline, claimed (PROCESSING)
by a bulk reader, and removed from the store once the vendor has confirmed
the send, whether it succeeded or failed terminally. Deletion is the only
way out of PROCESSING; there is no soft-delete status.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from dispatcher.domain import dispatcher
from dispatcher.message.payload import MessagePayload
from dispatcher.message.queue_message import QueueMessage
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text
from protean.utils.reflection import declared_fields


class PayloadStatus(Enum):
    READY = "Ready"
    PROCESSING = "Processing"


_VALID_TRANSITIONS = {
    PayloadStatus.READY: {PayloadStatus.PROCESSING},
    PayloadStatus.PROCESSING: set(),  # Terminal until deleted
}


def statuses_leading_to(target: PayloadStatus) -> list[str]:
    """Status values from which ``target`` can be reached."""
    return [status.value for status, targets in _VALID_TRANSITIONS.items() if target in targets]


@dispatcher.aggregate
class BulkMessagePayload:
    """Persisted envelope of one message waiting for a bulk vendor."""

    bulk_vendor_name: String(required=True, max_length=100)  # Always lower-case
    status: String(choices=PayloadStatus, default=PayloadStatus.READY.value)
    invitation_id: String(max_length=100)
    message: Text(required=True)  # JSON of the QueueMessage needed to resend
    created: DateTime()

    @classmethod
    def create(cls, payload: MessagePayload) -> "BulkMessagePayload":
        """Wrap a processed message for its bulk vendor, in READY status."""
        if not payload.vendor_name:
            raise ValidationError({"bulk_vendor_name": ["A bulk vendor name is required"]})

        return cls(
            bulk_vendor_name=payload.vendor_name.lower(),
            status=PayloadStatus.READY.value,
            invitation_id=payload.invitation_id,
            message=json.dumps(payload.queue_message.to_dict()),
            created=datetime.now(UTC),
        )

    @classmethod
    def from_document(cls, document: dict) -> "BulkMessagePayload":
        known = declared_fields(cls)
        return cls(**{key: value for key, value in document.items() if key in known})

    def to_document(self) -> dict:
        return {
            "id": str(self.id),
            "bulk_vendor_name": self.bulk_vendor_name,
            "status": self.status,
            "invitation_id": self.invitation_id,
            "message": self.message,
            "created": self.created,
        }

    def queue_message(self) -> QueueMessage:
        return QueueMessage.from_dict(json.loads(self.message))

    def mark_processing(self):
        """Claim the payload for sending."""
        current = PayloadStatus(self.status)
        if PayloadStatus.PROCESSING not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"status": [f"Cannot transition from {current.value} to {PayloadStatus.PROCESSING.value}"]}
            )
        self.status = PayloadStatus.PROCESSING.value
