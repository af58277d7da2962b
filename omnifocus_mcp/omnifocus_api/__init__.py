"""
OmniFocus API layer package.
Builds JXA snippets, runs them through osascript and post-processes the records.
"""

from .data_models import FolderRecord, ProjectRecord, TagRecord, TaskRecord, ToolResult
from .errors import (
    AutomationExecutionError,
    LogicalNotFoundError,
    OmniFocusError,
    ResponseParseError,
    ValidationError,
)
from .jxa_client import JXAExecutor, OmniFocusBridge, parse_response

__all__ = [
    'AutomationExecutionError',
    'FolderRecord',
    'JXAExecutor',
    'LogicalNotFoundError',
    'OmniFocusBridge',
    'OmniFocusError',
    'ProjectRecord',
    'ResponseParseError',
    'TagRecord',
    'TaskRecord',
    'ToolResult',
    'ValidationError',
    'parse_response',
]
