from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel


class AppEntryModel(BaseModel):
    id: str
    name: str
    icon: str
    description: str = ""
    categories: List[str] = []
    running: bool = False


class LauncherStateResponse(BaseModel):
    visible: bool
    selected_index: int
    current_tab: str
    search_filter: str
    results: List[AppEntryModel]


class TabRequest(BaseModel):
    tab: Literal["installed", "available"]


class SearchRequest(BaseModel):
    query: str = ""


class KeyRequest(BaseModel):
    key: str
    alt: bool = False
    meta: bool = False


class LaunchRequest(BaseModel):
    app_id: str


class InstallRequest(BaseModel):
    package: str
    confirmed: bool = False


class InstallResponse(BaseModel):
    status: str
    package: str
    message: str = ""


class KeyResponse(BaseModel):
    action: str
    window: Optional[dict] = None
    package: Optional[str] = None
    state: LauncherStateResponse
