from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..rendering import templates
from ..schemas.launcher import (
    InstallRequest,
    InstallResponse,
    KeyRequest,
    KeyResponse,
    LaunchRequest,
    LauncherStateResponse,
    SearchRequest,
    TabRequest,
)
from ..schemas.windows import WindowResponse
from ..services.shell import DesktopShell, get_shell

router = APIRouter(prefix="/launcher")


def _state(shell: DesktopShell) -> LauncherStateResponse:
    return LauncherStateResponse(**shell.launcher.state())


@router.get("", response_model=LauncherStateResponse)
async def launcher_state(shell: DesktopShell = Depends(get_shell)):
    return _state(shell)


@router.post("/open", response_model=LauncherStateResponse)
async def open_launcher(shell: DesktopShell = Depends(get_shell)):
    await shell.launcher.open()
    return _state(shell)


@router.post("/close", response_model=LauncherStateResponse)
async def close_launcher(shell: DesktopShell = Depends(get_shell)):
    shell.launcher.close()
    return _state(shell)


@router.post("/tab", response_model=LauncherStateResponse)
async def switch_tab(payload: TabRequest, shell: DesktopShell = Depends(get_shell)):
    await shell.launcher.switch_tab(payload.tab)
    return _state(shell)


@router.post("/search", response_model=LauncherStateResponse)
async def search(payload: SearchRequest, shell: DesktopShell = Depends(get_shell)):
    shell.launcher.search(payload.query)
    return _state(shell)


@router.get("/results", response_class=HTMLResponse)
async def search_fragment(request: Request, q: str = "", shell: DesktopShell = Depends(get_shell)):
    shell.launcher.search(q)
    return templates.TemplateResponse(request, "launcher_list.html", {"launcher": shell.launcher.state()})


@router.post("/keys", response_model=KeyResponse)
async def handle_key(payload: KeyRequest, shell: DesktopShell = Depends(get_shell)):
    result = await shell.launcher.handle_key(payload.key, alt=payload.alt, meta=payload.meta)
    return KeyResponse(**result.to_dict(), state=_state(shell))


@router.post("/launch", response_model=WindowResponse)
async def launch(payload: LaunchRequest, shell: DesktopShell = Depends(get_shell)):
    window = await shell.launcher.launch(payload.app_id)
    return WindowResponse(**window.to_dict())


@router.post("/install", response_model=InstallResponse)
async def install(payload: InstallRequest, shell: DesktopShell = Depends(get_shell)):
    result = await shell.launcher.install_package(payload.package, payload.confirmed)
    return InstallResponse(**result.to_dict())
