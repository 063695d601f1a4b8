"""Runtime settings for the dispatcher core.

Settings are built once at startup (usually via ``DispatcherSettings.from_env()``)
and handed to every component constructor. Nothing in the core looks them up
from a global.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class DispatcherSettings:
    """Immutable process-wide configuration."""

    # Highest severity rank persisted to the event log (1 = Critical ... 5 = Verbose)
    log_level: int = 5
    bulk_vendor_name: str = ""
    bulk_read_size: int = 100
    survey_base_domain: str = ""
    unsubscribe_base_url: str = ""
    # Total attempts to persist an internal-error event before the fallback sink
    max_self_log_attempts: int = 3
    log_event_collection: str = "EventLog"
    bulk_payload_collection: str = "BulkMessage"

    def __post_init__(self):
        # A document store reads a zero limit as "no limit"
        if self.bulk_read_size < 1:
            raise ValueError(f"bulk_read_size must be at least 1, got {self.bulk_read_size}")

    @classmethod
    def from_env(cls, environ=None) -> "DispatcherSettings":
        """Build settings from ``DISPATCHER_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            log_level=int(env.get("DISPATCHER_LOG_LEVEL", defaults.log_level)),
            bulk_vendor_name=env.get("DISPATCHER_BULK_VENDOR_NAME", defaults.bulk_vendor_name),
            bulk_read_size=int(env.get("DISPATCHER_BULK_READ_SIZE", defaults.bulk_read_size)),
            survey_base_domain=env.get("DISPATCHER_SURVEY_BASE_DOMAIN", defaults.survey_base_domain),
            unsubscribe_base_url=env.get("DISPATCHER_UNSUBSCRIBE_BASE_URL", defaults.unsubscribe_base_url),
            max_self_log_attempts=int(
                env.get("DISPATCHER_MAX_SELF_LOG_ATTEMPTS", defaults.max_self_log_attempts)
            ),
            log_event_collection=env.get("DISPATCHER_LOG_EVENT_COLLECTION", defaults.log_event_collection),
            bulk_payload_collection=env.get(
                "DISPATCHER_BULK_PAYLOAD_COLLECTION", defaults.bulk_payload_collection
            ),
        )

    @property
    def normalized_vendor_name(self) -> str:
        return self.bulk_vendor_name.lower()
