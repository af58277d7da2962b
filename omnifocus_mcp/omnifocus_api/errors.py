"""Error taxonomy for the OmniFocus automation bridge."""


class OmniFocusError(Exception):
    """Base class for every failure the bridge reports to callers."""


class ValidationError(OmniFocusError):
    """A caller argument is missing or malformed. Raised before any process is spawned."""


class AutomationExecutionError(OmniFocusError):
    """osascript exited non-zero or OmniFocus could not be reached."""

    def __init__(self, message: str, stderr: str = "", returncode: int = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class ResponseParseError(OmniFocusError):
    """The snippet's stdout was not valid JSON."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class LogicalNotFoundError(OmniFocusError):
    """The snippet ran but reported an ``error`` field, e.g. a missing task."""
