from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LayoutTemplateModel(BaseModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)
    type: str = Field(min_length=1)
    description: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
    builtin: bool = False


class ApplyLayoutResponse(BaseModel):
    applied: bool
    template_id: str
    mode: str
    window_ids: List[int] = Field(default_factory=list)


class ImportRequest(BaseModel):
    configuration: str


class CaptureLayoutRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
