"""Shared plumbing for the domain services."""

import functools
import json
from datetime import datetime
from typing import Any, Callable, Optional

from ..omnifocus_api.data_models import ToolResult
from ..omnifocus_api.errors import OmniFocusError
from ..omnifocus_api.jxa_client import OmniFocusBridge
from ..omnifocus_api.utils import now_local, parse_iso
from ..utils.logger import get_logger

log = get_logger(__name__)

Clock = Callable[[], datetime]


def reports_errors(action: str):
    """Turn an :class:`OmniFocusError` raised by the wrapped operation into an
    error result reading ``Error <action>: <message>``.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except OmniFocusError as e:
                log.warning("Error %s: %s", action, e)
                return ToolResult.error(f"Error {action}: {e}")
        return wrapper
    return decorator


def dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def date_string(value: Optional[str]) -> str:
    """Render an ISO date as ``Mon Jan 06 2025`` in local time."""
    parsed = parse_iso(value)
    if parsed is None:
        return "no date"
    return parsed.astimezone().strftime("%a %b %d %Y")


class BaseService:
    def __init__(self, bridge: OmniFocusBridge, clock: Optional[Clock] = None):
        self.bridge = bridge
        self.clock = clock or now_local
