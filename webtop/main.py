from contextlib import asynccontextmanager
import logging
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings
from .services.shell import DesktopShell
from .utils.central_logging import setup_central_logging
from .utils.logging_middleware import LoggingMiddleware

from .routes.desktop_gui import router as desktop_gui_router
from .routes.desktops import router as desktops_router
from .routes.health import router as health_router
from .routes.launcher import router as launcher_router
from .routes.layouts import router as layouts_router
from .routes.panels import router as panels_router
from .routes.preferences import router as preferences_router
from .routes.windows import router as windows_router

logger = logging.getLogger("webtop.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    shell: DesktopShell = app.state.shell
    try:
        await shell.startup()
    except OSError as e:
        logger.warning(f"Could not load saved desktop state (using defaults): {e}")
    yield
    await shell.shutdown()
    logger.info("Desktop shell stopped")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_central_logging(settings.log_dir if settings.log_to_files else None)

    app = FastAPI(
        title="Webtop Desktop Shell",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.shell = DesktopShell(settings, transport=transport)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error("Request validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.detail,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal Server Error",
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred."
                }
            }
        )

    allowed_origins = [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router, tags=["Monitoring"])
    app.include_router(windows_router, prefix="/v1", tags=["Windows"])
    app.include_router(layouts_router, prefix="/v1", tags=["Layouts"])
    app.include_router(desktops_router, prefix="/v1", tags=["Desktops"])
    app.include_router(launcher_router, prefix="/v1", tags=["Launcher"])
    app.include_router(panels_router, prefix="/v1", tags=["Panels"])
    app.include_router(preferences_router, prefix="/v1", tags=["Preferences"])
    app.include_router(desktop_gui_router)

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app

# Uvicorn Entry
app = create_app()
