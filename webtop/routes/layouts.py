from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from ..schemas.layouts import ApplyLayoutResponse, CaptureLayoutRequest, ImportRequest, LayoutTemplateModel
from ..services.layout_engine import TemplateError, TemplateNotFound, TemplateReadOnly
from ..services.shell import DesktopShell, get_shell
from ..utils.errors import api_error, not_found

router = APIRouter(prefix="/layouts")


@router.get("", response_model=List[LayoutTemplateModel])
async def list_templates(shell: DesktopShell = Depends(get_shell)):
    return [LayoutTemplateModel(**t.to_dict()) for t in shell.layouts.get_layout_templates()]


@router.get("/export", response_class=PlainTextResponse)
async def export_templates(shell: DesktopShell = Depends(get_shell)):
    return PlainTextResponse(shell.layouts.export_configuration(), media_type="application/json")


@router.post("/import", response_model=List[LayoutTemplateModel])
async def import_templates(payload: ImportRequest, shell: DesktopShell = Depends(get_shell)):
    try:
        imported = await shell.layouts.import_configuration(payload.configuration)
    except ValueError as exc:
        raise api_error(str(exc), code="invalid_configuration") from exc
    return [LayoutTemplateModel(**t.to_dict()) for t in imported]


@router.post("/capture", response_model=LayoutTemplateModel, status_code=status.HTTP_201_CREATED)
async def capture_layout(payload: CaptureLayoutRequest, shell: DesktopShell = Depends(get_shell)):
    """Save where the visible windows are now as a custom template."""
    try:
        template = await shell.layouts.save_current_layout(payload.name, payload.id)
    except TemplateReadOnly as exc:
        raise api_error(str(exc), status_code=403, code="template_read_only") from exc
    except TemplateError as exc:
        raise api_error(str(exc), code="invalid_template") from exc
    return LayoutTemplateModel(**template.to_dict())


@router.put("/{template_id}", response_model=LayoutTemplateModel)
async def save_template(template_id: str, payload: LayoutTemplateModel, shell: DesktopShell = Depends(get_shell)):
    data = payload.model_dump()
    data["id"] = template_id
    try:
        template = await shell.layouts.save_layout_template(data)
    except TemplateReadOnly as exc:
        raise api_error(str(exc), status_code=403, code="template_read_only") from exc
    except TemplateError as exc:
        raise api_error(str(exc), code="invalid_template") from exc
    return LayoutTemplateModel(**template.to_dict())


@router.delete("/{template_id}", response_model=LayoutTemplateModel)
async def delete_template(template_id: str, shell: DesktopShell = Depends(get_shell)):
    try:
        template = await shell.layouts.delete_layout_template(template_id)
    except TemplateReadOnly as exc:
        raise api_error(str(exc), status_code=403, code="template_read_only") from exc
    except TemplateNotFound as exc:
        raise not_found(str(exc), code="template_not_found") from exc
    return LayoutTemplateModel(**template.to_dict())


@router.post("/{template_id}/apply", response_model=ApplyLayoutResponse)
async def apply_template(template_id: str, shell: DesktopShell = Depends(get_shell)):
    """Apply a template; unknown ids are accepted and change nothing."""
    arranged = shell.layouts.apply_layout_template(template_id)
    return ApplyLayoutResponse(
        applied=arranged is not None,
        template_id=template_id,
        mode=shell.windows.mode,
        window_ids=[w.id for w in arranged or []],
    )
