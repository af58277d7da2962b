#!/usr/bin/env python3
import json
import shutil
from typing import Optional

import anyio
import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .omnifocus_api.jxa_client import JXAExecutor, OmniFocusBridge
from .tools import ToolRegistry, build_registry
from .utils.config import BridgeSettings, load_env_vars
from .utils.logger import configure_logging, get_logger

# Load environment variables
load_env_vars()

log = get_logger(__name__)

app = typer.Typer(
    name="ofmcp",
    help="OmniFocus MCP bridge - serve OmniFocus tools over MCP or call them directly.",
    no_args_is_help=True,
)

console = Console()


def get_registry() -> ToolRegistry:
    return build_registry(settings=BridgeSettings.from_env())


def _version_callback(value: bool):
    if value:
        console.print(f"ofmcp {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override OFMCP_LOG_LEVEL."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
):
    """OmniFocus MCP bridge."""
    configure_logging((log_level or BridgeSettings.from_env().log_level).upper())


@app.command("serve")
def serve_command():
    """Run the MCP server on stdin/stdout."""
    from .server import serve

    anyio.run(serve, get_registry())


@app.command("tools")
def tools_command(
    json_output: bool = typer.Option(False, "--json", help="Print the full tool list with input schemas as JSON."),
):
    """List every available tool."""
    tools = get_registry().list_tools()
    if json_output:
        console.print_json(json.dumps(tools))
        return

    table = Table(title=f"{len(tools)} tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    for tool in tools:
        table.add_row(tool["name"], tool["description"])
    console.print(table)


@app.command("call")
def call_command(
    name: str = typer.Argument(..., help="Tool name, e.g. get_tasks."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object."),
):
    """Invoke one tool and print its text result."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid --args JSON: {e}[/red]")
        raise typer.Exit(code=2)
    if not isinstance(arguments, dict):
        console.print("[red]--args must be a JSON object[/red]")
        raise typer.Exit(code=2)

    result = get_registry().invoke(name, arguments)
    console.print(result.text, markup=False, highlight=False)
    if result.is_error:
        raise typer.Exit(code=1)


@app.command("diagnostics")
def diagnostics():
    """Check that osascript and OmniFocus are reachable."""
    settings = BridgeSettings.from_env()
    console.print(f"Application: {settings.app_name}")

    osascript_path = shutil.which(settings.osascript)
    if osascript_path:
        console.print(f"✅ {settings.osascript} found at {osascript_path}", style="green")
    else:
        console.print(f"❌ {settings.osascript} not found on PATH", style="red")
        raise typer.Exit(code=1)

    bridge = OmniFocusBridge(JXAExecutor(settings.app_name, settings.osascript))
    if bridge.is_available():
        console.print(f"✅ {settings.app_name} is responding", style="green")
    else:
        console.print(f"❌ {settings.app_name} did not respond; is it installed and running?", style="red")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
