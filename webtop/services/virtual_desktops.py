from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .window_manager import WindowManager

logger = logging.getLogger("webtop.desktops")

_DEFAULT_NAME = re.compile(r"^Desktop \d+$")


class DesktopError(Exception):
    pass


class DesktopNotFound(DesktopError):
    def __init__(self, desktop_id: str) -> None:
        super().__init__(f"Desktop {desktop_id} not found")
        self.desktop_id = desktop_id


@dataclass(slots=True)
class VirtualDesktop:
    id: str
    name: str
    index: int
    is_active: bool = False
    template_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "index": self.index,
            "is_active": self.is_active,
            "template_id": self.template_id,
        }


class VirtualDesktops:
    """Named desktops; every window belongs to exactly one of them."""

    def __init__(self, windows: WindowManager, count: int = 4) -> None:
        self.windows = windows
        self.desktops: List[VirtualDesktop] = []
        self._next_id = 1
        for _ in range(max(1, count)):
            self._append()
        self.desktops[0].is_active = True
        windows.set_current_desktop(self.desktops[0].id)

    def _append(self, name: Optional[str] = None) -> VirtualDesktop:
        index = len(self.desktops)
        desktop = VirtualDesktop(
            id=f"desktop-{self._next_id}",
            name=name or f"Desktop {index + 1}",
            index=index,
        )
        self._next_id += 1
        self.desktops.append(desktop)
        return desktop

    def get(self, desktop_id: str) -> VirtualDesktop:
        for desktop in self.desktops:
            if desktop.id == desktop_id:
                return desktop
        raise DesktopNotFound(desktop_id)

    @property
    def active(self) -> VirtualDesktop:
        return next(d for d in self.desktops if d.is_active)

    def create(self, name: Optional[str] = None) -> VirtualDesktop:
        desktop = self._append(name)
        logger.info("Created desktop %s (%s)", desktop.id, desktop.name)
        return desktop

    def switch(self, desktop_id: str) -> VirtualDesktop:
        target = self.get(desktop_id)
        for desktop in self.desktops:
            desktop.is_active = desktop is target
        self.windows.set_current_desktop(target.id)
        return target

    def delete(self, desktop_id: str) -> VirtualDesktop:
        """Remove a desktop; its windows move to the first remaining desktop."""
        target = self.get(desktop_id)
        if len(self.desktops) <= 1:
            raise DesktopError("Cannot delete the last desktop")

        self.desktops.remove(target)
        for index, desktop in enumerate(self.desktops):
            desktop.index = index
            if _DEFAULT_NAME.match(desktop.name):
                desktop.name = f"Desktop {index + 1}"

        fallback = self.desktops[0]
        self.windows.reassign_desktop(target.id, fallback.id)
        if target.is_active:
            self.switch(fallback.id)
        elif self.windows.mode == "tiling":
            self.windows.apply_tiling()
        logger.info("Deleted desktop %s", target.id)
        return target

    def rename(self, desktop_id: str, name: str) -> VirtualDesktop:
        desktop = self.get(desktop_id)
        desktop.name = name
        return desktop

    def move_window(self, window_id: int, desktop_id: str):
        self.get(desktop_id)
        return self.windows.move_to_desktop(window_id, desktop_id)

    def to_list(self) -> List[Dict[str, Any]]:
        result = []
        for desktop in self.desktops:
            item = desktop.to_dict()
            item["window_count"] = len(self.windows.desktop_windows(desktop.id))
            result.append(item)
        return result
