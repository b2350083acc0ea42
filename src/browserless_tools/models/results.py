"""Result envelopes shared by every tool operation."""

from typing import Any

from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """Uniform envelope returned to the calling agent.

    ``url`` prefers the live session URL so a human observer can follow along;
    ``error`` is set whenever the operation failed, in which case ``summary``
    still carries a readable description.
    """

    summary: str = Field(..., description="Human-readable outcome")
    url: str | None = Field(default=None, description="Live URL, else current page URL")
    details: dict[str, Any] | None = Field(default=None, description="Operation specific data")
    error: str | None = Field(default=None, description="Error message when the operation failed")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_envelope(self) -> dict[str, Any]:
        """Serialise to the wire shape, omitting unset keys."""
        envelope = self.model_dump(exclude_none=True)
        if self.details is not None:
            envelope["details"] = {k: v for k, v in self.details.items() if v is not None}
        return envelope


class CaptchaEvent(BaseModel):
    """Outcome of waiting for the provider's CAPTCHA event."""

    detected: bool = False
    info: Any = None
