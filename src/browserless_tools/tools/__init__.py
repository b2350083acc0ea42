"""Agent-facing tool surface."""

from browserless_tools.tools.definitions import TOOL_SPECS, ToolSpec, get_tool_definitions
from browserless_tools.tools.facade import BrowserlessToolkit

__all__ = [
    "BrowserlessToolkit",
    "TOOL_SPECS",
    "ToolSpec",
    "get_tool_definitions",
]
