from datetime import datetime, UTC
from typing import Optional, Union


def utcnow() -> datetime:
    """Naive UTC timestamp; every TIMESTAMP column stores naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO 8601 value coming from the client into naive UTC.

    Accepts a trailing 'Z'. Raises ValueError for unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("Empty datetime")
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed.replace(microsecond=0)
