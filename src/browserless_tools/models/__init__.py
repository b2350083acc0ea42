"""Pydantic models for browserless-tools."""

from .elements import AnchorDescriptor, BoundingBox, ElementDescriptor
from .results import ActionResult, CaptchaEvent

__all__ = [
    # Catalog entries
    "AnchorDescriptor",
    "BoundingBox",
    "ElementDescriptor",
    # Envelopes
    "ActionResult",
    "CaptchaEvent",
]
