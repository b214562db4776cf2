from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SectionModel(BaseModel):
    key: str
    title: str
    status: str
    rows: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class PanelResponse(BaseModel):
    app_id: str
    title: str
    sections: List[SectionModel]
    actions: List[str] = Field(default_factory=list)
    notice: Optional[str] = None
    confirm_action: Optional[str] = None


class ActionRequest(BaseModel):
    params: Dict[str, Any] = Field(default_factory=dict)
