"""
App launcher overlay: installed and available app lists, fuzzy search,
the keyboard contract and launch/install.

All state lives on a ``Launcher`` instance owned by the desktop shell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..utils.http import extract_http_error
from ..utils.http_client import BackendClient
from .app_catalog import AppEntry, builtin_apps
from .app_registry import AppRegistry
from .fuzzy_search import DEFAULT_KEYS, FuzzyIndex
from .window_manager import Window, WindowManager

logger = logging.getLogger("webtop.launcher")

TABS = ("installed", "available")
OPEN_KEY = " "


@dataclass(slots=True)
class KeyResult:
    action: str  # none | moved | launched | confirm-install | opened | closed
    window: Optional[Window] = None
    package: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "window": self.window.to_dict() if self.window else None,
            "package": self.package,
        }


@dataclass(slots=True)
class InstallResult:
    status: str  # cancelled | installed | failed
    package: str
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "package": self.package, "message": self.message}


class Launcher:
    def __init__(
        self,
        windows: WindowManager,
        registry: AppRegistry,
        backend: BackendClient,
        *,
        result_limit: int = 50,
        threshold: float = 0.4,
        default_package_query: str = "firefox gimp vlc",
    ) -> None:
        self.windows = windows
        self.registry = registry
        self.backend = backend
        self.result_limit = result_limit
        self.threshold = threshold
        self.default_package_query = default_package_query

        self.installed_apps: List[AppEntry] = builtin_apps()
        self.available_apps: List[AppEntry] = []
        self.visible = False
        self.results: List[AppEntry] = []
        self._reset()

    def _reset(self) -> None:
        self.selected_index = 0
        self.current_tab = "installed"
        self.search_filter = ""
        self.results = list(self.installed_apps)

    # ------------------------------------------------------------------
    # Backend lists
    # ------------------------------------------------------------------

    async def refresh_installed(self) -> List[AppEntry]:
        """Built-in catalog plus the backend's installed apps, replaced wholesale."""
        try:
            data = await self.backend.request_json("GET", "/api/packages/installed")
            extra = [AppEntry.from_backend(a) for a in (data or {}).get("apps", []) if isinstance(a, dict)]
            self.installed_apps = builtin_apps() + extra
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Failed to fetch installed apps: {e}")
            self.installed_apps = builtin_apps()
        return self.installed_apps

    async def search_packages(self, query: str) -> List[AppEntry]:
        try:
            data = await self.backend.request_json("GET", "/api/packages/search", params={"q": query})
            packages = (data or {}).get("packages") or []
            self.available_apps = [AppEntry.from_backend(p) for p in packages if isinstance(p, dict)]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Failed to search packages: {e}")
            self.available_apps = []
        return self.available_apps

    # ------------------------------------------------------------------
    # Overlay state
    # ------------------------------------------------------------------

    async def open(self) -> List[AppEntry]:
        self.visible = True
        await self.refresh_installed()
        self._reset()
        return self.search("")

    def close(self) -> None:
        self.visible = False
        self._reset()

    async def switch_tab(self, tab: str) -> List[AppEntry]:
        if tab not in TABS:
            raise ValueError(f"Unknown launcher tab: {tab}")
        self.current_tab = tab
        self.search_filter = ""
        self.selected_index = 0
        if tab == "available" and not self.available_apps:
            await self.search_packages(self.default_package_query)
        return self.search("")

    def active_list(self) -> List[AppEntry]:
        return self.installed_apps if self.current_tab == "installed" else self.available_apps

    def is_app_running(self, entry: AppEntry) -> bool:
        return self.windows.is_running(entry.name) or any(w.app_id == entry.id for w in self.windows.windows)

    def search(self, query: str) -> List[AppEntry]:
        """Filter the active tab; running apps first, rank order kept inside each group."""
        self.search_filter = query
        self.selected_index = 0
        apps = self.active_list()
        if not query.strip():
            ranked = list(apps)
        else:
            index = FuzzyIndex(apps, DEFAULT_KEYS, threshold=self.threshold)
            ranked = [m.item for m in index.search(query, limit=self.result_limit)]
        running = [a for a in ranked if self.is_app_running(a)]
        idle = [a for a in ranked if not self.is_app_running(a)]
        self.results = running + idle
        return self.results

    @property
    def selected(self) -> Optional[AppEntry]:
        if 0 <= self.selected_index < len(self.results):
            return self.results[self.selected_index]
        return None

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    async def handle_key(self, key: str, *, alt: bool = False, meta: bool = False) -> KeyResult:
        if key == OPEN_KEY and (alt or meta):
            await self.open()
            return KeyResult("opened")
        if not self.visible:
            return KeyResult("none")

        if key == "ArrowDown":
            self.selected_index = min(self.selected_index + 1, max(len(self.results) - 1, 0))
            return KeyResult("moved")
        if key == "ArrowUp":
            self.selected_index = max(self.selected_index - 1, 0)
            return KeyResult("moved")
        if key == "Escape":
            self.close()
            return KeyResult("closed")
        if key == "Enter":
            entry = self.selected
            if entry is None:
                return KeyResult("none")
            if self.current_tab == "installed":
                window = await self.launch(entry.id)
                self.close()
                return KeyResult("launched", window=window)
            # installing needs an explicit confirmation from the user
            return KeyResult("confirm-install", package=entry.name)
        return KeyResult("none")

    # ------------------------------------------------------------------
    # Launch / install
    # ------------------------------------------------------------------

    async def launch(self, app_id: str) -> Window:
        handler = self.registry.resolve(app_id)
        existing = self.windows.find_by_title(handler.title)
        if existing is not None:
            logger.debug(f"{app_id} already running, focusing window {existing.id}")
            return self.windows.focus_window(existing.id)
        content = await handler.open()
        window = self.windows.create_window(handler.title, content, app_id=app_id)
        logger.info(f"Launched {app_id} in window {window.id}")
        return window

    async def install_package(self, name: str, confirmed: bool) -> InstallResult:
        if not confirmed:
            return InstallResult("cancelled", name)
        try:
            data = await self.backend.request_json("POST", "/api/packages/install", {"packageName": name})
        except httpx.HTTPStatusError as e:
            message, _ = extract_http_error(e.response)
            logger.error(f"Install of {name} failed: {message}")
            return InstallResult("failed", name, message)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error installing {name}: {e}")
            return InstallResult("failed", name, str(e) or "Request failed")

        if isinstance(data, dict) and data.get("success"):
            await self.refresh_installed()
            if self.current_tab == "installed":
                self.search(self.search_filter)
            return InstallResult("installed", name, f"{name} installed successfully!")
        error = data.get("error") if isinstance(data, dict) else None
        return InstallResult("failed", name, str(error or "Unknown error"))

    def state(self) -> Dict[str, Any]:
        return {
            "visible": self.visible,
            "selected_index": self.selected_index,
            "current_tab": self.current_tab,
            "search_filter": self.search_filter,
            "results": [
                {**a.to_dict(), "running": self.is_app_running(a)} for a in self.results
            ],
        }
