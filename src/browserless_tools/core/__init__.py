"""Configuration and logging for browserless-tools."""

from browserless_tools.core.config import BrowserlessConfig, Environment, Settings, get_settings
from browserless_tools.core.logging import LogContext, get_logger, setup_logging

__all__ = [
    "BrowserlessConfig",
    "Environment",
    "Settings",
    "get_settings",
    "LogContext",
    "get_logger",
    "setup_logging",
]
