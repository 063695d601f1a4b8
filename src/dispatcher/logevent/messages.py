"""Catalogue of dispatcher log messages.

Every LogMessage the dispatcher writes is built here so that wording and
severity stay consistent across components.
"""

import traceback

from dispatcher.logevent.logevent import LogMessage, SeverityLevel


def internal_exception(exc: BaseException) -> LogMessage:
    """An unexpected failure caught at a component boundary."""
    return LogMessage(
        level=SeverityLevel.ERROR.value,
        message=f"An internal exception occurred: {type(exc).__name__}: {exc}",
        exception="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def dispatch_successful(channel: str, vendor_name: str | None = None) -> LogMessage:
    return LogMessage(
        level=SeverityLevel.INFORMATION.value,
        message=f"Message dispatched successfully via {channel} (vendor: {vendor_name or 'n/a'})",
    )


def dispatch_unsuccessful(channel: str, reason: str, vendor_name: str | None = None) -> LogMessage:
    return LogMessage(
        level=SeverityLevel.ERROR.value,
        message=f"Message dispatch via {channel} failed (vendor: {vendor_name or 'n/a'}): {reason}",
    )


def bulk_payload_queued(vendor_name: str) -> LogMessage:
    return LogMessage(
        level=SeverityLevel.VERBOSE.value,
        message=f"Message queued for bulk vendor {vendor_name}",
    )
