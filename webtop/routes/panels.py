from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..rendering import templates
from ..schemas.panels import ActionRequest, PanelResponse
from ..services.panels import PanelValidationError, ResourcePanel, UnknownAction
from ..services.shell import DesktopShell, get_shell
from ..utils.errors import api_error, not_found

router = APIRouter(prefix="/panels")


def _panel(shell: DesktopShell, app_id: str) -> ResourcePanel:
    panel = shell.panels.get(app_id)
    if panel is None:
        raise not_found(f"No panel for app '{app_id}'", code="panel_not_found")
    return panel


@router.get("/{app_id}", response_model=PanelResponse)
async def load_panel(app_id: str, shell: DesktopShell = Depends(get_shell)):
    view = await _panel(shell, app_id).load(shell.backend)
    return PanelResponse(**view.to_dict())


@router.get("/{app_id}/fragment", response_class=HTMLResponse)
async def panel_fragment(app_id: str, request: Request, shell: DesktopShell = Depends(get_shell)):
    view = await _panel(shell, app_id).load(shell.backend)
    return templates.TemplateResponse(request, "panel.html", {"view": view})


@router.post("/{app_id}/actions/{action}", response_model=PanelResponse)
async def run_action(app_id: str, action: str, payload: ActionRequest, shell: DesktopShell = Depends(get_shell)):
    panel = _panel(shell, app_id)
    try:
        view = await panel.run_action(shell.backend, action, payload.params)
    except PanelValidationError as exc:
        raise api_error(str(exc), code="validation_error", sanitize=False) from exc
    except UnknownAction as exc:
        raise not_found(str(exc), code="action_not_found") from exc
    return PanelResponse(**view.to_dict())
