from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..schemas.preferences import DesktopCreateRequest, MoveToDesktopRequest
from ..services.shell import DesktopShell, get_shell
from ..services.virtual_desktops import DesktopError, DesktopNotFound
from ..services.window_manager import WindowNotFound
from ..utils.errors import api_error, not_found

router = APIRouter(prefix="/desktops")


@router.get("")
async def list_desktops(shell: DesktopShell = Depends(get_shell)):
    return {"active": shell.desktops.active.id, "desktops": shell.desktops.to_list()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_desktop(payload: DesktopCreateRequest, shell: DesktopShell = Depends(get_shell)):
    return shell.desktops.create(payload.name).to_dict()


@router.delete("/{desktop_id}")
async def delete_desktop(desktop_id: str, shell: DesktopShell = Depends(get_shell)):
    try:
        shell.desktops.delete(desktop_id)
    except DesktopNotFound as exc:
        raise not_found(str(exc), code="desktop_not_found") from exc
    except DesktopError as exc:
        raise api_error(str(exc), status_code=409, code="last_desktop") from exc
    return {"active": shell.desktops.active.id, "desktops": shell.desktops.to_list()}


@router.post("/{desktop_id}/switch")
async def switch_desktop(desktop_id: str, shell: DesktopShell = Depends(get_shell)):
    try:
        return shell.desktops.switch(desktop_id).to_dict()
    except DesktopNotFound as exc:
        raise not_found(str(exc), code="desktop_not_found") from exc


@router.post("/{desktop_id}/windows")
async def move_window_to_desktop(
    desktop_id: str,
    payload: MoveToDesktopRequest,
    shell: DesktopShell = Depends(get_shell),
):
    try:
        window = shell.desktops.move_window(payload.window_id, desktop_id)
    except DesktopNotFound as exc:
        raise not_found(str(exc), code="desktop_not_found") from exc
    except WindowNotFound as exc:
        raise not_found(str(exc), code="window_not_found") from exc
    return window.to_dict()
