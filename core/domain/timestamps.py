"""
UTC timestamp helpers.

Signed artifacts carry timestamps as ISO-8601 UTC strings with exactly
millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``.
"""
import re
from datetime import datetime, timezone

from core.domain.exceptions import MalformedInputError

_TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})$"
)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime truncated to milliseconds."""
    return normalize_timestamp(datetime.now(timezone.utc))


def normalize_timestamp(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC with millisecond precision.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    value = normalize_timestamp(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp with an explicit UTC designator or offset.

    Args:
        value: Timestamp string

    Returns:
        Aware UTC datetime with millisecond precision

    Raises:
        MalformedInputError: If the string is not a zoned ISO-8601 timestamp
    """
    if not isinstance(value, str) or not _TIMESTAMP_PATTERN.match(value):
        raise MalformedInputError(f"Invalid timestamp: {value!r}")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    fraction = re.search(r"\.(\d+)", text)
    if fraction:
        # fromisoformat only accepts 3 or 6 fractional digits before 3.11
        digits = fraction.group(1).ljust(6, "0")
        text = text[: fraction.start(1)] + digits + text[fraction.end(1):]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedInputError(f"Invalid timestamp: {value!r}") from e
    return normalize_timestamp(parsed)
