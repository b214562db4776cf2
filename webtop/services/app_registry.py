from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from ..rendering import render_fragment

logger = logging.getLogger("webtop.registry")

Opener = Callable[[], Awaitable[str]]


@dataclass(slots=True)
class AppHandler:
    app_id: str
    title: str
    open: Opener


def placeholder_opener(title: str, note: str = "Native app integration coming soon") -> Opener:
    async def open_placeholder() -> str:
        return render_fragment("placeholder.html", title=title, note=note)

    return open_placeholder


class AppRegistry:
    """app id -> handler that produces the window content."""

    def __init__(self) -> None:
        self._handlers: Dict[str, AppHandler] = {}

    def register(self, app_id: str, title: str, opener: Opener) -> AppHandler:
        handler = AppHandler(app_id, title, opener)
        self._handlers[app_id] = handler
        return handler

    def get(self, app_id: str) -> Optional[AppHandler]:
        return self._handlers.get(app_id)

    def resolve(self, app_id: str) -> AppHandler:
        """Known handler, or a generic placeholder titled with the id."""
        handler = self._handlers.get(app_id)
        if handler is None:
            logger.info(f"No handler for {app_id!r}, opening placeholder")
            handler = AppHandler(app_id, app_id, placeholder_opener(app_id))
        return handler

    def ids(self) -> List[str]:
        return list(self._handlers)
