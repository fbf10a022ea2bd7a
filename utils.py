from datetime import datetime
from typing import Optional
import time


def parse_date(date_str) -> Optional[datetime]:
    """Parse a date string into a datetime object, None if it cannot be parsed."""
    if not isinstance(date_str, str):
        return None
    try:
        parsed = datetime.fromisoformat(date_str)
    except ValueError:
        try:
            parsed = datetime.strptime(date_str, "%Y-%m-%d %H:%M")
        except ValueError:
            return None
    # Compare everything as naive local time.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_millis() -> int:
    return int(time.time() * 1000)


def loose_id(value) -> Optional[int]:
    """Coerce a numeric or numeric-string id to int, e.g. 3 and "3" both give 3."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def display_name_from_email(email: str) -> str:
    """Local part of an email address, used as a default display name."""
    return email.split("@")[0]
