"""Tool definitions exposed to the agent.

Each entry maps a tool name to its input schema and the description the model
sees. ``get_tool_definitions`` renders them in the Anthropic tool calling
format (``name`` / ``description`` / ``input_schema``).
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from browserless_tools.tools.schemas import (
    CaptchaWaitInput,
    ClickInput,
    GetTextInput,
    KeyPressInput,
    ListAnchorsInput,
    ListSelectorsInput,
    NavigateInput,
    QuerySelectorsInput,
    SessionEndInput,
    TypeInput,
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "navigate",
        "Navigate the browser to a specific URL and wait for the network to be idle. "
        "Returns the live session URL so a human can watch.",
        NavigateInput,
    ),
    ToolSpec(
        "click",
        "Click an element matching a CSS selector. Falls back to a JavaScript click and "
        "to searching inside iframes when a normal click fails.",
        ClickInput,
    ),
    ToolSpec(
        "type",
        "Type text into an input or editable element specified by a CSS selector, "
        "replacing its current content.",
        TypeInput,
    ),
    ToolSpec(
        "keyPress",
        "Press a keyboard key (e.g., Enter, ArrowDown, Control+A). Waits briefly for a "
        "page load when the key triggers navigation.",
        KeyPressInput,
    ),
    ToolSpec(
        "listSelectors",
        "Return a compact catalog of actionable DOM elements (unique selectors and labels), "
        "most prominent first. Use the selectors with click and type.",
        ListSelectorsInput,
    ),
    ToolSpec(
        "listAnchors",
        "Return anchor links (<a> tags) from the current page with href, text and metadata "
        "such as rel, target and whether the link is external.",
        ListAnchorsInput,
    ),
    ToolSpec(
        "getText",
        "Extract plain visible text from the current page (no HTML; whitespace normalized).",
        GetTextInput,
    ),
    ToolSpec(
        "querySelectors",
        "Search actionable selectors by keyword across labels, selectors and link targets.",
        QuerySelectorsInput,
    ),
    ToolSpec(
        "captchaWait",
        "Wait for a CAPTCHA to be detected on the current page. On detection, returns a live "
        "URL a human can open to solve it.",
        CaptchaWaitInput,
    ),
    ToolSpec(
        "sessionEnd",
        "ALWAYS USE AT THE END OF A SESSION. THIS IS REQUIRED. Close the current Browserless "
        "browser session and clear cached references. Safe to call more than once.",
        SessionEndInput,
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema for a tool input using the agent-facing aliases."""
    schema = model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    schema.setdefault("properties", {})
    schema.setdefault("required", [])
    return schema


def get_tool_definitions() -> list[dict[str, Any]]:
    """Get tool definitions for the agent's function-calling surface.

    Returns:
        List of tool definition dictionaries
    """
    return [
        {
            "name": spec.name,
            "description": spec.description,
            "input_schema": input_schema(spec.input_model),
        }
        for spec in TOOL_SPECS
    ]
