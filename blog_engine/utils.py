"""Small text and timestamp helpers shared by the services."""

import math
import re
from datetime import datetime, timezone
from typing import Optional

from blog_engine.errors import InvalidInputError

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime in the fixed-width form used by every stored record.

    Naive datetimes are taken to be UTC. The output always has millisecond
    precision (YYYY-MM-DDTHH:MM:SS.mmmZ) so string order is time order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def normalize_timestamp(value: Optional[str], field_name: Optional[str] = None) -> Optional[str]:
    """
    Normalize an ISO-8601 string (date or datetime, any offset) to the stored form.

    Raises:
        InvalidInputError: if the value is not an ISO-8601 date or datetime
    """
    if value is None:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidInputError(f"Invalid ISO-8601 timestamp: {value!r}", field_name=field_name)
    return format_timestamp(parsed)


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def reading_time(content: str) -> int:
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def make_excerpt(content: str) -> str:
    if len(content) <= EXCERPT_LENGTH:
        return content
    return content[:EXCERPT_LENGTH] + "..."
