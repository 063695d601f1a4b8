"""Survey and unsubscribe URL builders."""

from dispatcher.config import DispatcherSettings
from dispatcher.message.queue_message import QueueMessage


def survey_url(message: QueueMessage, settings: DispatcherSettings) -> str:
    """Token-specific survey URL, with the message's additional URL parameters appended."""
    return f"http://{settings.survey_base_domain}/{message.token_id}{message.additional_url_parameter or ''}"


def unsubscribe_url(message: QueueMessage, settings: DispatcherSettings) -> str:
    return f"{settings.unsubscribe_base_url}{message.token_id}"
