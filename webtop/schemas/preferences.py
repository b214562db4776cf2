from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class PreferencesModel(BaseModel):
    windowOpacity: float
    wallpaper: str
    useGradient: bool


class PreferencesUpdate(BaseModel):
    windowOpacity: Optional[float] = Field(default=None, ge=0.1, le=1.0)
    wallpaper: Optional[str] = None
    useGradient: Optional[bool] = None


class DesktopCreateRequest(BaseModel):
    name: Optional[str] = None


class MoveToDesktopRequest(BaseModel):
    window_id: int
