"""browserless-tools: agent browsing primitives over a remote Browserless session."""

from browserless_tools.core.config import BrowserlessConfig
from browserless_tools.models import ActionResult
from browserless_tools.tools import BrowserlessToolkit, get_tool_definitions

__version__ = "0.1.0"

__all__ = [
    "ActionResult",
    "BrowserlessConfig",
    "BrowserlessToolkit",
    "get_tool_definitions",
]
