"""Configuration and logging helpers."""

from .config import BridgeSettings, get_config, load_env_vars
from .logger import configure_logging, get_logger

__all__ = [
    "BridgeSettings",
    "configure_logging",
    "get_config",
    "get_logger",
    "load_env_vars",
]
