"""MessagePayload — the processing outcome of one queue message.

Collects everything that happened to a message while it moved through the
dispatch pipeline: application-level log events, and the invitation-journey
sub-events to append to the invitation's parent LogEvent. A batch of
payloads is handed to LogFlushPipeline.flush_batch() in one go.
"""

from dataclasses import dataclass, field

from dispatcher.logevent.factory import build_invitation_log_event, build_log_event
from dispatcher.logevent.logevent import (
    EventAction,
    EventChannel,
    InvitationLogEvent,
    LogEvent,
    LogMessage,
)
from dispatcher.message.queue_message import QueueMessage


@dataclass
class MessagePayload:
    queue_message: QueueMessage
    invitation_id: str | None = None  # Id of the LogEvent holding the invitation journey
    vendor_name: str | None = None
    log_events: list[LogEvent] = field(default_factory=list)
    invitation_log_events: list[InvitationLogEvent] = field(default_factory=list)

    def log(self, log_message: LogMessage | None) -> LogEvent:
        """Record an application-level event for this message."""
        event = build_log_event(self.queue_message, log_message)
        self.log_events.append(event)
        return event

    def track(
        self,
        action: EventAction,
        channel: EventChannel,
        log_message: LogMessage | None = None,
    ) -> InvitationLogEvent:
        """Record a stage of the invitation journey for this message."""
        event = build_invitation_log_event(action, channel, self.queue_message, log_message)
        self.invitation_log_events.append(event)
        return event
