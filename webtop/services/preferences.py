from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .storage import JsonStore

logger = logging.getLogger("webtop.preferences")


@dataclass(slots=True)
class Preferences:
    windowOpacity: float = 0.95
    wallpaper: str = ""
    useGradient: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class PreferencesService:
    """User appearance settings, read at startup and written on change."""

    def __init__(self, defaults: Preferences, store: Optional[JsonStore] = None) -> None:
        self.defaults = defaults
        self.store = store
        self.current = Preferences(**defaults.to_dict())

    async def load(self) -> Preferences:
        if self.store is not None:
            data = await self.store.load(default={})
            try:
                self._merge(data if isinstance(data, dict) else {})
            except (TypeError, ValueError) as e:
                logger.warning(f"Ignoring stored preferences: {e}")
                self.current = Preferences(**self.defaults.to_dict())
        return self.current

    def _merge(self, data: Dict[str, Any]) -> None:
        if "windowOpacity" in data:
            opacity = float(data["windowOpacity"])
            if not 0.1 <= opacity <= 1.0:
                raise ValueError("windowOpacity must be between 0.1 and 1.0")
            self.current.windowOpacity = opacity
        if data.get("wallpaper"):
            self.current.wallpaper = str(data["wallpaper"])
        if "useGradient" in data:
            self.current.useGradient = bool(data["useGradient"])

    async def update(self, changes: Dict[str, Any]) -> Preferences:
        self._merge({k: v for k, v in changes.items() if v is not None})
        if self.store is not None:
            await self.store.save(self.current.to_dict())
        logger.info(f"Preferences updated: {sorted(changes)}")
        return self.current

    async def reset(self) -> Preferences:
        self.current = Preferences(**self.defaults.to_dict())
        if self.store is not None:
            await self.store.save(self.current.to_dict())
        return self.current
