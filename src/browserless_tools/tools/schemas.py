"""Input schemas for the agent-facing tools.

Field aliases are the camelCase names the agent sends (``delayMs``,
``nearViewportOnly``); snake_case names are accepted too.
"""

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolInput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NavigateInput(ToolInput):
    url: AnyHttpUrl = Field(..., description="Absolute http(s) URL to open")


class ClickInput(ToolInput):
    selector: str = Field(..., min_length=1, description="CSS selector of the element to click")


class TypeInput(ToolInput):
    selector: str = Field(..., min_length=1, description="CSS selector of the field")
    text: str = Field(..., description="Text that replaces the field's content")


class KeyPressInput(ToolInput):
    key: str = Field(..., min_length=1, description="Key or chord, e.g. Enter, ArrowDown, Control+A")
    delay_ms: int | None = Field(
        default=None, ge=0, le=2000, description="Delay between keydown and keyup in ms"
    )


class CatalogInput(ToolInput):
    max: int | None = Field(default=None, ge=1, le=200, description="Maximum entries to return")
    near_viewport_only: bool | None = Field(
        default=None, description="Only include elements intersecting the viewport"
    )


class ListSelectorsInput(CatalogInput):
    pass


class ListAnchorsInput(CatalogInput):
    pass


class GetTextInput(ToolInput):
    pass


class QuerySelectorsInput(ToolInput):
    query: str = Field(..., min_length=1, description="Keyword matched against labels and selectors")
    max: int | None = Field(default=None, ge=1, le=200, description="Maximum matches to return")


class CaptchaWaitInput(ToolInput):
    timeout_ms: int | None = Field(
        default=None, ge=0, le=300_000, description="How long to wait for a CAPTCHA (ms)"
    )


class SessionEndInput(ToolInput):
    pass
