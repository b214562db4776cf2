import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..services.shell import DesktopShell, get_shell

router = APIRouter()

logger = logging.getLogger("webtop.health")

HEALTH_RESPONSE = {"ok": True, "status": "ok"}


@router.get(
    "/health",
    tags=["Monitoring"],
    summary="Health check endpoint",
    include_in_schema=False,
)
@router.get(
    "/healthz",
    tags=["Monitoring"],
    summary="Kubernetes style health check endpoint",
    include_in_schema=False,
)
async def health_check():
    logger.debug("Health check received")
    return JSONResponse(content=HEALTH_RESPONSE, status_code=status.HTTP_200_OK)


@router.get("/v1/status", tags=["Monitoring"], summary="Desktop state summary")
async def desktop_status(shell: DesktopShell = Depends(get_shell)):
    """Counts only; the backend is not contacted."""
    return {
        "windows": len(shell.windows.windows),
        "mode": shell.windows.mode,
        "desktops": len(shell.desktops.desktops),
        "active_desktop": shell.desktops.active.id,
        "apps": len(shell.registry.ids()),
        "backend_url": str(shell.settings.backend_url),
    }
