"""Utility functions for the OmniFocus API layer."""

import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from dateutil.parser import isoparse


def js_literal(value: Any) -> str:
    """Encode *value* as a JavaScript literal.

    This is the only way caller data may enter a generated snippet. JSON is a
    subset of JavaScript expression syntax, so strings, numbers, booleans,
    ``None``, lists and dicts all come out as inert literals.
    """
    return json.dumps(value, ensure_ascii=True)


def shell_single_quote(text: str) -> str:
    """Escape *text* for use inside a single-quoted POSIX shell argument.

    Each ``'`` closes the quoted string, emits a double-quoted quote and
    reopens the single-quoted string. Callers supply the outer quotes.
    """
    return text.replace("'", "'\"'\"'")


def now_local() -> datetime:
    """Timezone-aware current local time."""
    return datetime.now().astimezone()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date string the way ``new Date(value)`` reads it.

    A bare ``YYYY-MM-DD`` is midnight UTC; a date-time without an offset is
    local time.
    """
    if not value:
        return None
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        if len(value) == 10:
            return parsed.replace(tzinfo=timezone.utc)
        parsed = parsed.astimezone()
    return parsed


def day_bounds(now: datetime) -> Tuple[datetime, datetime, datetime]:
    """Return (start_of_today, start_of_tomorrow, end_of_today) in *now*'s timezone."""
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_tomorrow = start_of_today + timedelta(days=1)
    end_of_today = now.replace(hour=23, minute=59, second=59, microsecond=999000)
    return start_of_today, start_of_tomorrow, end_of_today


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (halves go up)."""
    return int(math.floor(value + 0.5))


def plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"
