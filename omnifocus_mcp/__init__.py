"""
OmniFocus MCP bridge: OmniFocus task, project, folder and tag management
exposed as MCP tools, driven through JavaScript for Automation.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
