"""Template substitution — resolves PII tags in message content.

Message content may reference per-recipient answers with tags of the form::

    $QUESTIONID*|Default text|*

Each tag is replaced by the recipient's value for QUESTIONID (from the
message's ``mapped_value``) or, when the recipient has none, by the inline
default. The default may span several lines.
"""

import re

import structlog
from dispatcher.message.queue_message import QueueMessage

logger = structlog.get_logger(__name__)

TAG_PATTERN = re.compile(r"\$(\w+)\*\|(.*?)\|\*", re.DOTALL)

CONTENT_FIELDS = ("subject", "html_body", "text_body")


def substitute(text: str, mapping: dict[str, str]) -> str:
    """Resolve every tag in ``text`` against ``mapping``.

    Matches are collected from the original text, then each matched literal
    is replaced everywhere it occurs. Text without tags comes back unchanged.
    """
    result = text
    for match in TAG_PATTERN.finditer(text):
        question_id, default = match.group(1), match.group(2)
        replacement = mapping[question_id] if question_id in mapping else default
        result = result.replace(match.group(0), replacement)
    return result


async def perform_lookups(message: QueueMessage, pipeline) -> None:
    """Substitute tags in the subject, HTML body and text body of ``message``.

    Fields are rewritten in place. Blank fields are left alone. Any failure
    is reported through ``pipeline`` (a LogFlushPipeline) and swallowed; the
    message keeps whatever content it had at that point.
    """
    try:
        mapping = message.mapped_value or {}
        for name in CONTENT_FIELDS:
            value = getattr(message, name)
            if not value or value.isspace():
                continue
            setattr(message, name, substitute(value, mapping))
    except Exception as e:
        logger.error(
            "Tag substitution failed",
            token_id=getattr(message, "token_id", None),
            error=str(e),
        )
        await pipeline.report_exception(e)
