"""Log event factory — builds audit records from queue messages.

Pure construction, no I/O. Both builders snapshot identifiers from the
QueueMessage at call time; later mutations of the message do not leak into
already built events.
"""

import json
from datetime import UTC, datetime

from dispatcher.logevent.logevent import (
    EventAction,
    EventChannel,
    InvitationLogEvent,
    LogEvent,
    LogMessage,
)
from dispatcher.message.queue_message import QueueMessage

# Channel → QueueMessage attribute holding that channel's contact address.
# Channels without an entry fall back to their own name, so no PII is recorded.
_CHANNEL_TARGET_FIELDS: dict[EventChannel, str] = {
    EventChannel.EMAIL: "email_id",
    EventChannel.SMS: "mobile_number",
}


def build_log_event(source: QueueMessage | None, log_message: LogMessage | None) -> LogEvent:
    """Create a LogEvent for an application-level occurrence.

    ``source`` is None for internally generated events (caught exceptions),
    in which case every identifier field stays empty.
    """
    now = datetime.now(UTC)

    prefills = None
    if source is not None and source.mapped_value:
        prefills = json.dumps(
            [
                {"question_id": key, "input": None, "input_hash": value}
                for key, value in source.mapped_value.items()
            ]
        )

    return LogEvent(
        batch_id=source.batch_id if source else None,
        dispatch_id=source.dispatch_id if source else None,
        token_id=source.token_id if source else None,
        user=source.user if source else None,
        target_hashed=source.common_identifier if source else None,
        prefills=prefills,
        log_message=log_message,
        created=now,
        updated=now,
    )


def resolve_target_id(channel: EventChannel, source: QueueMessage) -> str | None:
    field_name = _CHANNEL_TARGET_FIELDS.get(channel)
    if field_name is None:
        return channel.value
    return getattr(source, field_name)


def build_invitation_log_event(
    action: EventAction,
    channel: EventChannel,
    source: QueueMessage,
    log_message: LogMessage | None = None,
) -> InvitationLogEvent:
    """Create the sub-event recording one stage of an invitation's journey.

    ``source`` is required: the summary text reads its template id and
    additional URL parameters.
    """
    if source is None:
        raise ValueError("An invitation log event requires a source queue message")

    return InvitationLogEvent(
        action=action.value,
        channel=channel.value,
        message=(
            f"Message Template Id: {source.template_id} | "
            f"Additional Token Parameters: {source.additional_url_parameter}"
        ),
        target_id=resolve_target_id(channel, source),
        timestamp=datetime.now(UTC),
        log_message=log_message,
    )
