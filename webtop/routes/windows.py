from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse

from ..rendering import templates
from ..schemas.windows import (
    GroupArrangeRequest,
    GroupCreateRequest,
    GroupResponse,
    ModeRequest,
    ModeResponse,
    MoveRequest,
    ResizeRequest,
    ViewportModel,
    WindowCreateRequest,
    WindowListResponse,
    WindowResponse,
)
from ..services.shell import DesktopShell, get_shell
from ..services.window_manager import (
    GroupNotFound,
    LayoutModeError,
    Window,
    WindowManagerError,
    WindowNotFound,
)
from ..utils.errors import api_error, not_found

router = APIRouter(prefix="/windows")


def _window(shell: DesktopShell, window_id: int) -> Window:
    try:
        return shell.windows.get(window_id)
    except WindowNotFound as exc:
        raise not_found(str(exc), code="window_not_found") from exc


def _out(window: Window) -> WindowResponse:
    return WindowResponse(**window.to_dict())


@router.get("", response_model=WindowListResponse)
async def list_windows(shell: DesktopShell = Depends(get_shell)):
    return WindowListResponse(**shell.windows.snapshot())


@router.post("", response_model=WindowResponse, status_code=status.HTTP_201_CREATED)
async def create_window(payload: WindowCreateRequest, shell: DesktopShell = Depends(get_shell)):
    return _out(shell.windows.create_window(payload.title, payload.content, app_id=payload.app_id))


@router.get("/mode", response_model=ModeResponse)
async def get_mode(shell: DesktopShell = Depends(get_shell)):
    return ModeResponse(mode=shell.windows.mode)


@router.post("/mode", response_model=ModeResponse)
async def set_mode(payload: ModeRequest, shell: DesktopShell = Depends(get_shell)):
    """Set the layout mode, or toggle it when no mode is given."""
    if payload.mode is None:
        return ModeResponse(mode=shell.windows.toggle_mode())
    return ModeResponse(mode=shell.windows.set_mode(payload.mode))


@router.put("/viewport", response_model=WindowListResponse)
async def set_viewport(payload: ViewportModel, shell: DesktopShell = Depends(get_shell)):
    shell.windows.set_viewport(payload.width, payload.height)
    return WindowListResponse(**shell.windows.snapshot())


@router.post("/tile", response_model=List[WindowResponse])
async def tile(shell: DesktopShell = Depends(get_shell)):
    if shell.windows.mode != "tiling":
        raise api_error("Tiling is only available in tiling mode", status_code=409, code="layout_mode")
    return [_out(w) for w in shell.windows.apply_tiling()]


@router.post("/focus-next", response_model=WindowResponse)
async def focus_next(shell: DesktopShell = Depends(get_shell)):
    window = shell.windows.focus_next()
    if window is None:
        raise not_found("No visible windows", code="window_not_found")
    return _out(window)


@router.post("/focus-previous", response_model=WindowResponse)
async def focus_previous(shell: DesktopShell = Depends(get_shell)):
    window = shell.windows.focus_previous()
    if window is None:
        raise not_found("No visible windows", code="window_not_found")
    return _out(window)


def _group_errors(exc: WindowManagerError) -> Exception:
    if isinstance(exc, (WindowNotFound, GroupNotFound)):
        return not_found(str(exc), code="group_not_found" if isinstance(exc, GroupNotFound) else "window_not_found")
    if isinstance(exc, LayoutModeError):
        return api_error(str(exc), status_code=409, code="layout_mode")
    return api_error(str(exc), code="invalid_group", sanitize=False)


def _group_out(shell: DesktopShell, group_id: str, windows: List[Window]) -> GroupResponse:
    return GroupResponse(id=group_id, layout=shell.windows.group_layout(group_id), windows=[_out(w) for w in windows])


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(payload: GroupCreateRequest, shell: DesktopShell = Depends(get_shell)):
    try:
        group_id = shell.windows.create_group(payload.window_ids, payload.layout)
    except WindowManagerError as exc:
        raise _group_errors(exc) from exc
    return _group_out(shell, group_id, shell.windows.group_windows(group_id))


@router.post("/groups/{group_id}/arrange", response_model=GroupResponse)
async def arrange_group(group_id: str, payload: GroupArrangeRequest, shell: DesktopShell = Depends(get_shell)):
    try:
        windows = shell.windows.arrange_group(group_id, payload.layout)
    except WindowManagerError as exc:
        raise _group_errors(exc) from exc
    return _group_out(shell, group_id, windows)


@router.post("/groups/{group_id}/windows/{window_id}/activate", response_model=GroupResponse)
async def activate_group_window(group_id: str, window_id: int, shell: DesktopShell = Depends(get_shell)):
    try:
        shell.windows.activate_in_group(group_id, window_id)
    except WindowManagerError as exc:
        raise _group_errors(exc) from exc
    return _group_out(shell, group_id, shell.windows.group_windows(group_id))


@router.delete("/groups/{group_id}", response_model=List[WindowResponse])
async def ungroup(group_id: str, shell: DesktopShell = Depends(get_shell)):
    try:
        return [_out(w) for w in shell.windows.ungroup(group_id)]
    except WindowManagerError as exc:
        raise _group_errors(exc) from exc


@router.get("/{window_id}", response_model=WindowResponse)
async def get_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    return _out(_window(shell, window_id))


@router.get("/{window_id}/fragment", response_class=HTMLResponse)
async def window_fragment(window_id: int, request: Request, shell: DesktopShell = Depends(get_shell)):
    window = _window(shell, window_id)
    return templates.TemplateResponse(
        request,
        "window.html",
        {"window": window, "preferences": shell.preferences.current},
    )


@router.delete("/{window_id}", response_model=WindowResponse)
async def close_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    return _out(shell.windows.close_window(window_id))


@router.post("/{window_id}/focus", response_model=WindowResponse)
async def focus_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    return _out(shell.windows.focus_window(window_id))


@router.post("/{window_id}/minimize", response_model=WindowResponse)
async def minimize_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    return _out(shell.windows.minimize_window(window_id))


@router.post("/{window_id}/maximize", response_model=WindowResponse)
async def maximize_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    return _out(shell.windows.maximize_window(window_id))


@router.post("/{window_id}/center", response_model=WindowResponse)
async def center_window(window_id: int, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    return _out(shell.windows.center_window(window_id))


@router.post("/{window_id}/move", response_model=WindowResponse)
async def move_window(window_id: int, payload: MoveRequest, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    try:
        return _out(shell.windows.move_window(window_id, payload.x, payload.y))
    except LayoutModeError as exc:
        raise api_error(str(exc), status_code=409, code="layout_mode") from exc


@router.post("/{window_id}/resize", response_model=WindowResponse)
async def resize_window(window_id: int, payload: ResizeRequest, shell: DesktopShell = Depends(get_shell)):
    _window(shell, window_id)
    try:
        return _out(shell.windows.resize_window(window_id, payload.edge, payload.dx, payload.dy))
    except LayoutModeError as exc:
        raise api_error(str(exc), status_code=409, code="layout_mode") from exc
