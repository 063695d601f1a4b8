"""Dispatcher bounded context — audit logging and bulk-vendor payload lifecycle.

Consumes the outcomes of queued message-send requests (email, SMS and
survey invitations), resolves PII tag substitutions in message content,
batches the resulting audit events into the event log and manages the
bulk-vendor payload queue (Ready → Processing → deleted).
"""

import structlog
from protean.domain import Domain

dispatcher = Domain(name="dispatcher")

logger = structlog.get_logger(__name__)
