from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class WindowCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = ""
    app_id: Optional[str] = None


class WindowResponse(BaseModel):
    id: int
    title: str
    app_id: Optional[str] = None
    desktop_id: str
    x: int
    y: int
    width: int
    height: int
    z_index: int
    is_focused: bool
    is_minimized: bool
    is_maximized: bool
    is_snapped: bool
    snap_edge: Optional[str] = None
    group_id: Optional[str] = None


class ViewportModel(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class GroupModel(BaseModel):
    id: str
    layout: str
    window_ids: List[int]


class WindowListResponse(BaseModel):
    mode: str
    current_desktop_id: str
    viewport: dict
    windows: List[WindowResponse]
    groups: List[GroupModel] = Field(default_factory=list)


class MoveRequest(BaseModel):
    x: int
    y: int


class ResizeRequest(BaseModel):
    edge: Literal["n", "s", "e", "w", "ne", "nw", "se", "sw"]
    dx: int = 0
    dy: int = 0


class ModeRequest(BaseModel):
    mode: Optional[Literal["tiling", "floating"]] = None


class ModeResponse(BaseModel):
    mode: str


GroupLayout = Literal["tabs", "tiles", "stack"]


class GroupCreateRequest(BaseModel):
    window_ids: List[int] = Field(min_length=2)
    layout: GroupLayout = "tabs"


class GroupArrangeRequest(BaseModel):
    layout: Optional[GroupLayout] = None


class GroupResponse(BaseModel):
    id: str
    layout: str
    windows: List[WindowResponse]
