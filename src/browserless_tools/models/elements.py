"""Pydantic models for DOM catalog entries returned by in-page scripts."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class BoundingBox(_CamelModel):
    """Element box in CSS pixels, relative to the viewport."""

    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    @property
    def area(self) -> int:
        return max(0, self.w) * max(0, self.h)


class ElementDescriptor(_CamelModel):
    """Actionable element with a selector that resolves to exactly one node."""

    selector: str = Field(..., min_length=1, description="Minimal unique CSS path")
    label: str = Field(default="", description="Visible text, aria-label or fallback")
    tag: str = Field(..., description="Lower-case tag name")
    role: str | None = Field(default=None, description="ARIA role attribute")
    href: str | None = Field(default=None, description="Resolved href for links")
    type: str | None = Field(default=None, description="type attribute for inputs/buttons")
    visible: bool = True
    in_viewport: bool = False
    bbox: BoundingBox = Field(default_factory=BoundingBox)


class AnchorDescriptor(_CamelModel):
    """Link with resolved href and link-relation metadata."""

    selector: str = Field(..., min_length=1)
    href: str = Field(..., min_length=1, description="Absolute href, never empty")
    text: str = Field(default="", description="Text, aria-label, title or href")
    title: str | None = None
    aria_label: str | None = None
    rel: str | None = None
    target: str | None = None
    nofollow: bool = False
    external: bool = Field(default=False, description="Cross-origin relative to the page")
    visible: bool = True
    in_viewport: bool = False
    bbox: BoundingBox = Field(default_factory=BoundingBox)
