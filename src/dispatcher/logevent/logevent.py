"""LogEvent aggregate — one audit record in the dispatcher event log.

Two kinds of records live in the event log:

- application-level events, created once per loggable occurrence and carrying
  a LogMessage (severity + text);
- invitation documents, which accumulate an ordered list of
  InvitationLogEvent sub-events, one per stage of the invitation's journey.

LogEvents are append-only from the dispatcher's point of view. They are
inserted once, after which the only mutation is pushing sub-events onto
``events`` and bumping ``updated``. Nothing here ever deletes them.
"""

import json
from enum import Enum

from dispatcher.domain import dispatcher
from protean.fields import DateTime, String, Text, ValueObject

DISPATCHER_TAG = "Dispatcher"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class SeverityLevel(Enum):
    CRITICAL = "Critical"
    ERROR = "Error"
    WARNING = "Warning"
    INFORMATION = "Information"
    VERBOSE = "Verbose"


class EventAction(Enum):
    REQUESTED = "Requested"
    REJECTED = "Rejected"
    DISPATCH_SUCCESSFUL = "DispatchSuccessful"
    DISPATCH_UNSUCCESSFUL = "DispatchUnsuccessful"
    SUPPRESSED = "Suppressed"
    THROTTLED = "Throttled"


class EventChannel(Enum):
    EMAIL = "Email"
    SMS = "SMS"
    DISPATCH_API = "DispatchAPI"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dispatcher.value_object
class LogMessage:
    """Severity-tagged message carried by a LogEvent.

    ``level`` is free text on purpose: labels outside SeverityLevel are
    accepted and rank as least severe when filtered.
    """

    level: String(required=True, max_length=50)
    message: Text()
    exception: Text()

    def to_document(self) -> dict:
        return {
            "level": self.level,
            "message": self.message,
            "exception": self.exception,
        }


@dispatcher.value_object
class InvitationLogEvent:
    """One stage in an invitation's journey.

    Sub-events are owned by exactly one parent LogEvent and only ever exist
    inside its ``events`` list.
    """

    action: String(choices=EventAction, required=True)
    channel: String(choices=EventChannel, required=True)
    message: Text()
    target_id: String(max_length=320)
    timestamp: DateTime(required=True)
    log_message: ValueObject(LogMessage)

    def to_document(self) -> dict:
        return {
            "action": self.action,
            "channel": self.channel,
            "message": self.message,
            "target_id": self.target_id,
            "timestamp": self.timestamp,
            "log_message": self.log_message.to_document() if self.log_message else None,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@dispatcher.aggregate
class LogEvent:
    """A top-level audit document."""

    # Dispatch identity
    batch_id: String(max_length=100)
    dispatch_id: String(max_length=100)
    token_id: String(max_length=100)
    user: String(max_length=255)
    delivery_workflow_id: String(max_length=100)

    # Recipient. Only the caller-supplied hash is ever stored.
    target: String(max_length=320)
    target_hashed: String(max_length=512)
    location: String(max_length=255)

    prefills: Text()  # JSON: list of {question_id, input, input_hash}

    log_message: ValueObject(LogMessage)

    created: DateTime()
    updated: DateTime()

    def prefill_list(self) -> list[dict]:
        return json.loads(self.prefills) if self.prefills else []

    def to_document(self) -> dict:
        """Render the document written to the event log collection."""
        return {
            "id": str(self.id),
            "batch_id": self.batch_id,
            "dispatch_id": self.dispatch_id,
            "token_id": self.token_id,
            "user": self.user,
            "delivery_workflow_id": self.delivery_workflow_id,
            "target": self.target,
            "target_hashed": self.target_hashed,
            "location": self.location,
            "tags": [DISPATCHER_TAG],
            "prefills": self.prefill_list(),
            "events": [],
            "log_message": self.log_message.to_document() if self.log_message else None,
            "created": self.created,
            "updated": self.updated,
        }
