"""QueueMessage — one message-send request as read from the dispatch queue.

The message is produced elsewhere in the dispatch pipeline and is treated as
read-only input, except for its content fields, which the template
substitution engine rewrites in place before send.

``mapped_value`` maps question ids to *pre-hashed* answers. Those hashes are
what ends up in the audit trail; raw PII never does.
"""

from dataclasses import asdict, dataclass, field, fields


@dataclass
class QueueMessage:
    # Dispatch identity
    batch_id: str | None = None
    dispatch_id: str | None = None
    token_id: str | None = None
    common_identifier: str | None = None  # Hashed recipient identifier
    user: str | None = None

    # Template
    template_id: str | None = None
    additional_url_parameter: str | None = None

    # Content
    subject: str | None = None
    html_body: str | None = None
    text_body: str | None = None

    # Channel routing
    email_id: str | None = None
    mobile_number: str | None = None

    # Substitution / prefill values
    mapped_value: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "QueueMessage":
        """Build a message from a decoded queue payload, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if values.get("mapped_value") is None:
            values["mapped_value"] = {}
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)
