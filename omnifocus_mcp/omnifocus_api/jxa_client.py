"""JXA execution helper for the OmniFocus MCP bridge.

This module centralises the logic for running JavaScript for Automation
snippets against OmniFocus. Services never spawn processes themselves; they
hand a snippet to :class:`OmniFocusBridge`, which wraps it, runs it through
:class:`JXAExecutor` and decodes the single JSON line the snippet prints.

The snippet travels as a single-quoted shell argument to
``osascript -l JavaScript -e``. Any non-zero exit status raises
:class:`AutomationExecutionError` with stderr attached.
"""
from __future__ import annotations

import json
import subprocess
from typing import Any, Final, Optional

from ..utils.logger import get_logger
from .errors import AutomationExecutionError, LogicalNotFoundError, ResponseParseError
from .utils import js_literal, shell_single_quote

__all__: Final = [
    "JXAExecutor",
    "OmniFocusBridge",
    "parse_response",
]

log = get_logger(__name__)

APP_BINDING = "var app = Application"
DOC_BINDING = "var doc = app.defaultDocument"


class JXAExecutor:
    """Runs one complete snippet in a fresh ``osascript`` process per call."""

    def __init__(self, app_name: str = "OmniFocus", osascript: str = "osascript"):
        self.app_name = app_name
        self.osascript = osascript

    def prologue(self) -> str:
        return (
            f"{APP_BINDING}({js_literal(self.app_name)});\n"
            "app.includeStandardAdditions = true;\n"
            f"{DOC_BINDING};\n"
        )

    def wrap(self, script: str) -> str:
        """Prepend the app/doc bindings unless *script* already defines both."""
        if APP_BINDING in script and DOC_BINDING in script:
            return script
        return f"{self.prologue()}\n{script}"

    def build_command(self, script: str) -> str:
        full_script = self.wrap(script)
        return f"{self.osascript} -l JavaScript -e '{shell_single_quote(full_script)}'"

    def run(self, script: str) -> str:
        """Run *script* and return its stripped stdout."""
        command = self.build_command(script)
        log.debug("Running JXA snippet (%d chars)", len(command))
        try:
            process = subprocess.run(command, shell=True, capture_output=True, text=True, check=False)
        except OSError as e:
            raise AutomationExecutionError(f"OmniFocus automation failed: {e}", stderr=str(e)) from e

        if process.returncode != 0:
            stderr = process.stderr.strip()
            raise AutomationExecutionError(
                f"OmniFocus automation failed (code {process.returncode}): {stderr}",
                stderr=stderr,
                returncode=process.returncode,
            )
        return process.stdout.strip()


def parse_response(raw: str) -> Any:
    """Decode the JSON line printed by a snippet."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ResponseParseError(
            f"Failed to parse OmniFocus response: {e}. Raw response: {raw}", raw=raw
        ) from e


class OmniFocusBridge:
    """Executor plus parser. The single dependency every domain service holds."""

    def __init__(self, executor: Optional[JXAExecutor] = None):
        self.executor = executor or JXAExecutor()

    def execute(self, script: str) -> str:
        return self.executor.run(script)

    def execute_and_parse(self, script: str) -> Any:
        return parse_response(self.execute(script))

    def execute_checked(self, script: str) -> Any:
        """Like :meth:`execute_and_parse` but raises on an ``error`` field."""
        response = self.execute_and_parse(script)
        if isinstance(response, dict) and response.get("error"):
            raise LogicalNotFoundError(response["error"])
        return response

    def is_available(self) -> bool:
        """True when OmniFocus answers a trivial snippet."""
        script = "JSON.stringify({available: true, version: app.version()});"
        try:
            response = self.execute_and_parse(script)
        except (AutomationExecutionError, ResponseParseError) as e:
            log.warning("OmniFocus is not available: %s", e)
            return False
        return bool(isinstance(response, dict) and response.get("available"))
