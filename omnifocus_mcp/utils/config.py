"""
Configuration utilities for the OmniFocus MCP bridge.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

ENV_FILE_NAME = ".ofmcp.env"


def load_env_vars() -> None:
    """
    Load environment variables from .env files in the following order:
    1. .ofmcp.env in the current directory
    2. .ofmcp.env in the user's home directory

    Values already present in the environment are never overridden.
    """
    if os.path.exists(ENV_FILE_NAME):
        load_dotenv(ENV_FILE_NAME)

    home_env = Path.home() / ENV_FILE_NAME
    if home_env.exists():
        load_dotenv(home_env)


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get configuration value from environment variables."""
    return os.getenv(key, default)


@dataclass(frozen=True)
class BridgeSettings:
    app_name: str = "OmniFocus"
    osascript: str = "osascript"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        return cls(
            app_name=get_config("OFMCP_APP_NAME", cls.app_name),
            osascript=get_config("OFMCP_OSASCRIPT", cls.osascript),
            log_level=get_config("OFMCP_LOG_LEVEL", cls.log_level).upper(),
        )
