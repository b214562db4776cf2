from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx
from fastapi import Request

from ..config import Settings
from ..rendering import render_fragment
from ..utils.http_client import BackendClient
from .app_registry import AppRegistry, placeholder_opener
from .layout_engine import LayoutEngine
from .launcher import Launcher
from .panel_catalog import build_panels
from .panels import ResourcePanel
from .preferences import Preferences, PreferencesService
from .storage import store_in
from .virtual_desktops import VirtualDesktops
from .window_manager import WindowManager

logger = logging.getLogger("webtop.shell")

# Apps without a backend panel
PLACEHOLDER_APPS = {
    "terminal": ("Terminal", "Terminal sessions attach over a WebSocket"),
    "filemanager": ("File Manager", "Browse files through the backend file API"),
    "notes": ("Notes", "Loading notes..."),
    "editor": ("Text Editor", "Monaco Editor - Markdown Support"),
    "controlpanel": ("Control Panel", "System settings and configuration"),
}


class DesktopShell:
    """Process-wide desktop state, created once per application."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        headers = {}
        if settings.backend_token:
            headers["Authorization"] = f"Bearer {settings.backend_token}"
        self.backend = BackendClient(
            str(settings.backend_url),
            timeout=settings.request_timeout,
            retries=settings.backend_retries,
            headers=headers,
            transport=transport,
        )

        self.windows = WindowManager(
            settings.viewport_width,
            settings.viewport_height,
            gap=settings.layout_gap,
            mode=settings.default_layout_mode,
            snap_enabled=settings.snap_enabled,
            snap_threshold=settings.snap_threshold,
        )
        self.desktops = VirtualDesktops(self.windows, settings.desktop_count)
        self.layouts = LayoutEngine(self.windows, self.desktops, store_in(settings.data_dir, "layouts.json"))
        self.preferences = PreferencesService(
            Preferences(
                windowOpacity=settings.default_window_opacity,
                wallpaper=settings.default_wallpaper,
                useGradient=settings.default_use_gradient,
            ),
            store_in(settings.data_dir, "preferences.json"),
        )
        self.panels: Dict[str, ResourcePanel] = build_panels(settings.container_request_timeout)
        self.registry = AppRegistry()
        self._register_apps()
        self.launcher = Launcher(
            self.windows,
            self.registry,
            self.backend,
            result_limit=settings.launcher_result_limit,
            threshold=settings.fuzzy_threshold,
            default_package_query=settings.default_package_query,
        )

    def _panel_opener(self, panel: ResourcePanel):
        async def open_panel() -> str:
            view = await panel.load(self.backend)
            return render_fragment("panel.html", view=view)

        return open_panel

    async def _open_desktops(self) -> str:
        return render_fragment("desktops.html", desktops=self.desktops.to_list())

    def _register_apps(self) -> None:
        for app_id, (title, note) in PLACEHOLDER_APPS.items():
            self.registry.register(app_id, title, placeholder_opener(title, note))
        self.registry.register("virtual-desktops", "Virtual Desktops", self._open_desktops)
        for app_id, panel in self.panels.items():
            self.registry.register(app_id, panel.title, self._panel_opener(panel))

    async def startup(self) -> None:
        await self.layouts.load()
        await self.preferences.load()
        logger.info(
            f"Desktop shell ready | backend={self.settings.backend_url} "
            f"mode={self.windows.mode} apps={len(self.registry.ids())}"
        )

    async def shutdown(self) -> None:
        await self.backend.close()


def get_shell(request: Request) -> DesktopShell:
    return request.app.state.shell
