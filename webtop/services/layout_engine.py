"""Named layout templates and how they are applied to the window set."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .geometry import is_tiling_type
from .storage import JsonStore
from .virtual_desktops import VirtualDesktops
from .window_manager import Window, WindowManager

logger = logging.getLogger("webtop.layouts")


class TemplateError(Exception):
    pass


class TemplateReadOnly(TemplateError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Built-in template '{template_id}' cannot be changed")
        self.template_id = template_id


class TemplateNotFound(TemplateError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Layout template '{template_id}' not found")
        self.template_id = template_id


@dataclass(slots=True)
class LayoutTemplate:
    id: str
    name: str
    type: str
    description: str = ""
    config: Dict[str, Any] = field(default_factory=dict)
    builtin: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "config": dict(self.config),
            "builtin": self.builtin,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutTemplate":
        if not isinstance(data, dict):
            raise TemplateError("Template must be an object")
        template_id = str(data.get("id") or "").strip()
        name = str(data.get("name") or "").strip()
        layout_type = str(data.get("type") or "").strip()
        if not template_id:
            raise TemplateError("Template id is required")
        if not name or not layout_type:
            raise TemplateError("Template name and type are required")
        config = data.get("config") or {}
        if not isinstance(config, dict):
            raise TemplateError("Template config must be an object")
        return cls(
            id=template_id,
            name=name,
            type=layout_type,
            description=str(data.get("description") or ""),
            config=dict(config),
        )


BUILTIN_TEMPLATES: List[LayoutTemplate] = [
    LayoutTemplate("grid-2x2", "Grid 2x2", "grid", "2x2 grid layout", {"rows": 2, "cols": 2}, True),
    LayoutTemplate("grid-3x3", "Grid 3x3", "grid", "3x3 grid layout", {"rows": 3, "cols": 3}, True),
    LayoutTemplate("cascade", "Cascade", "cascade", "Overlapping windows offset", {"offset": 30}, True),
    LayoutTemplate("vertical-split", "Vertical Split", "vertical", "Side by side vertical layout", {"ratio": 0.5}, True),
    LayoutTemplate("horizontal-split", "Horizontal Split", "horizontal", "Top and bottom horizontal layout", {"ratio": 0.5}, True),
    LayoutTemplate(
        "master-stack",
        "Master Stack",
        "master-stack",
        "Master window with stacked others",
        {"masterRatio": 0.6, "stackDirection": "right"},
        True,
    ),
    LayoutTemplate("mosaic", "Mosaic", "mosaic", "Main window with a two-column mosaic", {}, True),
    LayoutTemplate("focus", "Focus", "focus", "Focused window centred, others in the corners", {}, True),
]

_BUILTIN_IDS = {t.id for t in BUILTIN_TEMPLATES}


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "layout"


class LayoutEngine:
    def __init__(
        self,
        windows: WindowManager,
        desktops: VirtualDesktops,
        store: Optional[JsonStore] = None,
    ) -> None:
        self.windows = windows
        self.desktops = desktops
        self.store = store
        self._user: Dict[str, LayoutTemplate] = {}

    async def load(self) -> None:
        if self.store is None:
            return
        data = await self.store.load(default=[])
        loaded = 0
        for item in data if isinstance(data, list) else []:
            try:
                template = LayoutTemplate.from_dict(item)
            except TemplateError as e:
                logger.warning(f"Skipping stored template: {e}")
                continue
            if template.id not in _BUILTIN_IDS:
                self._user[template.id] = template
                loaded += 1
        logger.info(f"Loaded {loaded} user layout templates")

    async def _persist(self) -> None:
        if self.store is not None:
            await self.store.save([t.to_dict() for t in self._user.values()])

    def get_layout_templates(self) -> List[LayoutTemplate]:
        return list(BUILTIN_TEMPLATES) + list(self._user.values())

    def get(self, template_id: str) -> Optional[LayoutTemplate]:
        for template in self.get_layout_templates():
            if template.id == template_id:
                return template
        return None

    def apply_layout_template(self, template_id: str) -> Optional[List[Window]]:
        """Arrange the visible windows by template; unknown ids do nothing."""
        template = self.get(template_id)
        if template is None:
            logger.debug(f"Ignoring unknown layout template {template_id!r}")
            return None

        wm = self.windows
        desktop = self.desktops.active
        if wm.mode == "tiling":
            if is_tiling_type(template.type):
                wm.set_tiling_rule(template.type, template.config)
            else:
                # overlapping layouts would be undone by the next re-tile
                wm.clear_tiling_rule()
                wm.set_mode("floating")

        arranged = wm.arrange(template.type, template.config)
        if template.type == "cascade":
            wm.restack(arranged)
        desktop.template_id = template.id
        logger.info(f"Applied layout {template.id} to {len(arranged)} windows")
        return arranged

    async def save_current_layout(self, name: str, template_id: Optional[str] = None) -> LayoutTemplate:
        """Store the visible windows' rectangles as a ``custom`` template.

        Applying it later restores the rectangles by position, so the n-th
        visible window takes the n-th saved rectangle.
        """
        name = name.strip()
        if not name:
            raise TemplateError("Template name and type are required")
        captured = [
            {"title": w.title, **w.rect.to_dict()}
            for w in self.windows.visible_windows()
        ]
        return await self.save_layout_template(
            {
                "id": template_id or f"custom-{_slug(name)}",
                "name": name,
                "type": "custom",
                "description": f"Saved arrangement of {len(captured)} windows",
                "config": {"windows": captured},
            }
        )

    async def save_layout_template(self, data: Dict[str, Any]) -> LayoutTemplate:
        template = LayoutTemplate.from_dict(data)
        if template.id in _BUILTIN_IDS:
            raise TemplateReadOnly(template.id)
        self._user[template.id] = template
        await self._persist()
        return template

    async def delete_layout_template(self, template_id: str) -> LayoutTemplate:
        if template_id in _BUILTIN_IDS:
            raise TemplateReadOnly(template_id)
        template = self._user.pop(template_id, None)
        if template is None:
            raise TemplateNotFound(template_id)
        for desktop in self.desktops.desktops:
            if desktop.template_id == template_id:
                desktop.template_id = None
        await self._persist()
        return template

    def export_configuration(self) -> str:
        return json.dumps(
            {"version": 1, "templates": [t.to_dict() for t in self._user.values()]},
            indent=2,
        )

    async def import_configuration(self, raw: str) -> List[LayoutTemplate]:
        try:
            data = json.loads(raw)
            items = data["templates"]
            if not isinstance(items, list):
                raise TypeError("templates must be a list")
            templates = [LayoutTemplate.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError, TemplateError) as e:
            logger.warning(f"Rejected layout import: {e}")
            raise ValueError("Invalid configuration format") from e

        imported = [t for t in templates if t.id not in _BUILTIN_IDS]
        for template in imported:
            self._user[template.id] = template
        await self._persist()
        return imported
