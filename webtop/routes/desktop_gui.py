from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..rendering import templates
from ..services.shell import DesktopShell, get_shell

router = APIRouter(tags=["GUI"])


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def desktop_page(request: Request, shell: DesktopShell = Depends(get_shell)):
    windows = sorted(shell.windows.desktop_windows(), key=lambda w: w.z_index)
    return templates.TemplateResponse(
        request,
        "desktop.html",
        {
            "windows": windows,
            "mode": shell.windows.mode,
            "desktops": shell.desktops.to_list(),
            "preferences": shell.preferences.current,
            "launcher": shell.launcher.state(),
        },
    )
