"""Severity filter — decides which log events are worth persisting.

Ranks run from most severe (Critical = 1) to least severe (Verbose = 5).
Labels outside the known set rank 10 and are only kept by a permissive
threshold. Events without a LogMessage are structural (invitation documents,
for example) and always pass.
"""

from dispatcher.logevent.logevent import LogMessage, SeverityLevel

UNKNOWN_RANK = 10

SEVERITY_RANKS: dict[str, int] = {
    SeverityLevel.CRITICAL.value: 1,
    SeverityLevel.ERROR.value: 2,
    SeverityLevel.WARNING.value: 3,
    SeverityLevel.INFORMATION.value: 4,
    SeverityLevel.VERBOSE.value: 5,
}


def severity_rank(level: str | None) -> int:
    return SEVERITY_RANKS.get(level, UNKNOWN_RANK)


def is_insertible(log_message: LogMessage | None, threshold: int) -> bool:
    """Return True when ``log_message`` should be written to the event log."""
    if log_message is None:
        return True
    return severity_rank(log_message.level) <= threshold
