"""Pydantic schema exports."""

from .layouts import ApplyLayoutResponse, ImportRequest, LayoutTemplateModel
from .windows import WindowCreateRequest, WindowListResponse, WindowResponse

__all__ = [
    "ApplyLayoutResponse",
    "ImportRequest",
    "LayoutTemplateModel",
    "WindowCreateRequest",
    "WindowListResponse",
    "WindowResponse",
]
