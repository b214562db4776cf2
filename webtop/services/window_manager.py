from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .geometry import (
    DEFAULT_GAP,
    MIN_HEIGHT,
    MIN_WIDTH,
    Rect,
    auto_grid_layout,
    compute_layout,
    detect_snap_edge,
    snap_rect,
    viewport_rect,
)

logger = logging.getLogger("webtop.windows")

LAYOUT_MODES = ("tiling", "floating")
DEFAULT_DESKTOP_ID = "desktop-1"
FIRST_Z_INDEX = 100
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
RESIZE_EDGES = frozenset({"n", "s", "e", "w", "ne", "nw", "se", "sw"})
GROUP_LAYOUTS = ("tabs", "tiles", "stack")
GROUP_TAB_BAR = 30
GROUP_STACK_OFFSET = 20


class WindowManagerError(Exception):
    """Base class for window manager failures."""


class WindowNotFound(WindowManagerError):
    def __init__(self, window_id: int) -> None:
        super().__init__(f"Window {window_id} not found")
        self.window_id = window_id


class LayoutModeError(WindowManagerError):
    """Raised for operations the current layout mode does not allow."""


class GroupNotFound(WindowManagerError):
    def __init__(self, group_id: str) -> None:
        super().__init__(f"Window group {group_id} not found")
        self.group_id = group_id


@dataclass(slots=True)
class Window:
    id: int
    title: str
    content: str = ""
    app_id: Optional[str] = None
    desktop_id: str = DEFAULT_DESKTOP_ID
    x: int = 0
    y: int = 0
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    z_index: int = FIRST_Z_INDEX
    is_focused: bool = False
    is_minimized: bool = False
    is_maximized: bool = False
    is_snapped: bool = False
    snap_edge: Optional[str] = None
    group_id: Optional[str] = None
    restore_rect: Optional[Rect] = field(default=None, repr=False)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def place(self, rect: Rect) -> None:
        self.x, self.y, self.width, self.height = rect.x, rect.y, rect.width, rect.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "app_id": self.app_id,
            "desktop_id": self.desktop_id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "z_index": self.z_index,
            "is_focused": self.is_focused,
            "is_minimized": self.is_minimized,
            "is_maximized": self.is_maximized,
            "is_snapped": self.is_snapped,
            "snap_edge": self.snap_edge,
            "group_id": self.group_id,
        }


class WindowManager:
    """Owns the open windows, their stacking order and the layout mode.

    State lives on the event loop thread and is only mutated from request
    handlers, so nothing here is locked.
    """

    def __init__(
        self,
        viewport_width: int = 1920,
        viewport_height: int = 1040,
        *,
        gap: int = DEFAULT_GAP,
        mode: str = "tiling",
        snap_enabled: bool = True,
        snap_threshold: int = 20,
    ) -> None:
        if mode not in LAYOUT_MODES:
            raise ValueError(f"Unknown layout mode: {mode}")
        self.windows: List[Window] = []
        self.mode = mode
        self.gap = gap
        self.viewport = viewport_rect(viewport_width, viewport_height)
        self.snap_enabled = snap_enabled
        self.snap_threshold = snap_threshold
        self.current_desktop_id = DEFAULT_DESKTOP_ID
        self._next_id = 1
        self._next_z = FIRST_Z_INDEX
        # desktop id -> (layout type, config) used when re-tiling
        self._tiling_rules: Dict[str, Tuple[str, Dict[str, Any]]] = {}
        # group id -> (member window ids, group layout)
        self._groups: Dict[str, Tuple[List[int], str]] = {}
        self._next_group = 1

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, window_id: int) -> Window:
        for window in self.windows:
            if window.id == window_id:
                return window
        raise WindowNotFound(window_id)

    def desktop_windows(self, desktop_id: Optional[str] = None) -> List[Window]:
        desktop_id = desktop_id or self.current_desktop_id
        return [w for w in self.windows if w.desktop_id == desktop_id]

    def visible_windows(self) -> List[Window]:
        return [w for w in self.desktop_windows() if not w.is_minimized]

    @property
    def focused_window(self) -> Optional[Window]:
        return next((w for w in self.windows if w.is_focused), None)

    def is_running(self, title: str) -> bool:
        wanted = title.lower()
        return any(w.title.lower() == wanted for w in self.windows)

    def find_by_title(self, title: str) -> Optional[Window]:
        wanted = title.lower()
        return next((w for w in self.windows if w.title.lower() == wanted), None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_window(self, title: str, content: str = "", app_id: Optional[str] = None) -> Window:
        offset = len(self.windows) * 20
        window = Window(
            id=self._next_id,
            title=title,
            content=content,
            app_id=app_id,
            desktop_id=self.current_desktop_id,
            x=100 + offset,
            y=60 + offset,
            z_index=self._take_z(),
        )
        self._next_id += 1
        self.windows.append(window)
        self._set_focus(window)
        logger.debug("Created window id=%d title=%r", window.id, title)

        if self.mode == "tiling":
            self.apply_tiling()
        return window

    def close_window(self, window_id: int) -> Window:
        window = self.get(window_id)
        self.windows.remove(window)
        self._leave_group(window)
        logger.debug("Closed window id=%d title=%r", window.id, window.title)

        if window.is_focused:
            window.is_focused = False
            self._focus_topmost()
        if self.mode == "tiling":
            self.apply_tiling()
        return window

    # ------------------------------------------------------------------
    # Focus and stacking
    # ------------------------------------------------------------------

    def _take_z(self) -> int:
        z = self._next_z
        self._next_z += 1
        return z

    def _set_focus(self, window: Optional[Window]) -> None:
        for other in self.windows:
            other.is_focused = False
        if window is not None:
            window.is_focused = True

    def _focus_topmost(self) -> None:
        candidates = self.visible_windows()
        top = max(candidates, key=lambda w: w.z_index) if candidates else None
        self._set_focus(top)

    def focus_window(self, window_id: int) -> Window:
        window = self.get(window_id)
        window.z_index = self._take_z()
        self._set_focus(window)
        if window.is_minimized:
            window.is_minimized = False
            if self.mode == "tiling":
                self.apply_tiling()
        return window

    def _cycle_focus(self, step: int) -> Optional[Window]:
        visible = self.visible_windows()
        if not visible:
            return None
        current = self.focused_window
        index = visible.index(current) if current in visible else -1
        if index == -1:
            target = visible[0] if step > 0 else visible[-1]
        else:
            target = visible[(index + step) % len(visible)]
        return self.focus_window(target.id)

    def focus_next(self) -> Optional[Window]:
        return self._cycle_focus(1)

    def focus_previous(self) -> Optional[Window]:
        return self._cycle_focus(-1)

    def restack(self, windows: List[Window]) -> None:
        """Give ``windows`` increasing z-indices in list order; the last gets focus."""
        for window in windows:
            window.z_index = self._take_z()
        if windows:
            self._set_focus(windows[-1])

    # ------------------------------------------------------------------
    # Window state
    # ------------------------------------------------------------------

    def minimize_window(self, window_id: int) -> Window:
        window = self.get(window_id)
        window.is_minimized = not window.is_minimized
        if window.is_minimized and window.is_focused:
            window.is_focused = False
            self._focus_topmost()
        if self.mode == "tiling":
            self.apply_tiling()
        return window

    def maximize_window(self, window_id: int) -> Window:
        window = self.get(window_id)
        if window.is_maximized:
            window.is_maximized = False
            if window.restore_rect is not None:
                window.place(window.restore_rect)
            window.restore_rect = None
            if self.mode == "tiling":
                self.apply_tiling()
        else:
            window.restore_rect = window.rect
            window.is_maximized = True
            window.place(self.viewport.inset(self.gap))
        return window

    def center_window(self, window_id: int) -> Window:
        window = self.get(window_id)
        window.x = (self.viewport.width - window.width) // 2
        window.y = (self.viewport.height - window.height) // 2
        return window

    def _require_floating(self, action: str) -> None:
        if self.mode != "floating":
            raise LayoutModeError(f"Cannot {action} windows in tiling mode")

    def move_window(self, window_id: int, x: int, y: int) -> Window:
        self._require_floating("move")
        window = self.get(window_id)
        if window.is_maximized:
            raise LayoutModeError("Cannot move a maximized window")
        self.focus_window(window_id)

        target = Rect(int(x), int(y), window.width, window.height)
        edge = None
        if self.snap_enabled:
            edge = detect_snap_edge(target, self.viewport, self.snap_threshold, self.gap)
        if edge:
            window.place(snap_rect(edge, self.viewport, self.gap))
        else:
            window.x, window.y = target.x, target.y
        window.is_snapped = edge is not None
        window.snap_edge = edge
        return window

    def resize_window(self, window_id: int, edge: str, dx: int, dy: int) -> Window:
        """Drag a resize handle by ``(dx, dy)``; ``edge`` is a compass direction."""
        self._require_floating("resize")
        if edge not in RESIZE_EDGES:
            raise ValueError(f"Unknown resize edge: {edge}")
        window = self.get(window_id)
        self.focus_window(window_id)

        start = window.rect
        if "e" in edge:
            window.width = max(MIN_WIDTH, start.width + dx)
        if "w" in edge:
            width = max(MIN_WIDTH, start.width - dx)
            window.x = start.x + (start.width - width)
            window.width = width
        if "s" in edge:
            window.height = max(MIN_HEIGHT, start.height + dy)
        if "n" in edge:
            height = max(MIN_HEIGHT, start.height - dy)
            window.y = start.y + (start.height - height)
            window.height = height
        window.is_snapped = False
        window.snap_edge = None
        return window

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def set_mode(self, mode: str) -> str:
        if mode not in LAYOUT_MODES:
            raise ValueError(f"Unknown layout mode: {mode}")
        if mode != self.mode:
            self.mode = mode
            logger.info("Layout mode -> %s", mode)
            if mode == "tiling":
                self.apply_tiling()
        return self.mode

    def toggle_mode(self) -> str:
        return self.set_mode("floating" if self.mode == "tiling" else "tiling")

    def set_viewport(self, width: int, height: int) -> Rect:
        self.viewport = viewport_rect(width, height)
        if self.mode == "tiling":
            self.apply_tiling()
        return self.viewport

    def set_tiling_rule(self, layout_type: str, config: Mapping[str, Any], desktop_id: Optional[str] = None) -> None:
        self._tiling_rules[desktop_id or self.current_desktop_id] = (layout_type, dict(config))

    def clear_tiling_rule(self, desktop_id: Optional[str] = None) -> None:
        self._tiling_rules.pop(desktop_id or self.current_desktop_id, None)

    def tiling_rule(self, desktop_id: Optional[str] = None) -> Optional[Tuple[str, Dict[str, Any]]]:
        return self._tiling_rules.get(desktop_id or self.current_desktop_id)

    def arrange(self, layout_type: str, config: Optional[Mapping[str, Any]] = None) -> List[Window]:
        """Write the geometry of ``layout_type`` onto the visible windows."""
        visible = self.visible_windows()
        config = dict(config or {})
        if layout_type == "focus":
            focused = self.focused_window
            config["focusIndex"] = visible.index(focused) if focused in visible else None
        rects = compute_layout(layout_type, len(visible), self.viewport, config, self.gap)
        self._place_all(visible, rects)
        return visible

    def apply_tiling(self) -> List[Window]:
        """Re-tile the visible windows; a no-op in floating mode."""
        if self.mode != "tiling":
            return []
        visible = self.visible_windows()
        rule = self.tiling_rule()
        if rule is not None:
            rects = compute_layout(rule[0], len(visible), self.viewport, rule[1], self.gap)
        else:
            rects = auto_grid_layout(len(visible), self.viewport, {}, self.gap)
        self._place_all(visible, rects)
        return visible

    def _place_all(self, windows: List[Window], rects: List[Rect]) -> None:
        for window, rect in zip(windows, rects):
            window.place(rect)
            window.is_maximized = False
            window.restore_rect = None
            window.is_snapped = False
            window.snap_edge = None

    # ------------------------------------------------------------------
    # Window groups
    # ------------------------------------------------------------------

    def group_windows(self, group_id: str) -> List[Window]:
        if group_id not in self._groups:
            raise GroupNotFound(group_id)
        ids, _ = self._groups[group_id]
        return [self.get(window_id) for window_id in ids]

    def group_layout(self, group_id: str) -> str:
        if group_id not in self._groups:
            raise GroupNotFound(group_id)
        return self._groups[group_id][1]

    def create_group(self, window_ids: List[int], layout: str = "tabs") -> str:
        """Group at least two floating windows and arrange them as ``layout``."""
        self._require_floating("group")
        if layout not in GROUP_LAYOUTS:
            raise ValueError(f"Unknown group layout: {layout}")
        windows = [self.get(window_id) for window_id in dict.fromkeys(window_ids)]
        if len(windows) < 2:
            raise WindowManagerError("A group needs at least two windows")

        for window in windows:
            self._leave_group(window)
        group_id = f"group-{self._next_group}"
        self._next_group += 1
        self._groups[group_id] = ([w.id for w in windows], layout)
        for window in windows:
            window.group_id = group_id
        logger.info("Grouped windows %s as %s (%s)", [w.id for w in windows], group_id, layout)
        self.arrange_group(group_id, layout)
        return group_id

    def arrange_group(self, group_id: str, layout: Optional[str] = None) -> List[Window]:
        """Lay a group out as tabs (one shown at a time), tiles or a stack."""
        self._require_floating("arrange")
        windows = self.group_windows(group_id)
        layout = layout or self.group_layout(group_id)
        if layout not in GROUP_LAYOUTS:
            raise ValueError(f"Unknown group layout: {layout}")
        self._groups[group_id] = ([w.id for w in windows], layout)

        area = self.viewport.inset(self.gap)
        if layout == "tabs":
            tab_area = Rect(area.x, area.y + GROUP_TAB_BAR, area.width, max(0, area.height - GROUP_TAB_BAR))
            self._place_all(windows, [tab_area] * len(windows))
            self.activate_in_group(group_id, windows[0].id)
        elif layout == "tiles":
            self._place_all(windows, auto_grid_layout(len(windows), self.viewport, {}, self.gap))
            for window in windows:
                window.is_minimized = False
            self.restack(windows)
        else:
            shrink = len(windows) * GROUP_STACK_OFFSET
            rects = [
                Rect(
                    area.x + i * GROUP_STACK_OFFSET,
                    area.y + i * GROUP_STACK_OFFSET,
                    max(MIN_WIDTH, area.width - shrink),
                    max(MIN_HEIGHT, area.height - shrink),
                )
                for i in range(len(windows))
            ]
            self._place_all(windows, rects)
            for window in windows:
                window.is_minimized = False
            self.restack(windows)
        return windows

    def activate_in_group(self, group_id: str, window_id: int) -> Window:
        """Bring a member forward; in a tab group the other members are hidden."""
        windows = self.group_windows(group_id)
        target = self.get(window_id)
        if target not in windows:
            raise WindowManagerError(f"Window {window_id} is not in {group_id}")
        if self.group_layout(group_id) == "tabs":
            for window in windows:
                window.is_minimized = window is not target
        return self.focus_window(target.id)

    def ungroup(self, group_id: str) -> List[Window]:
        windows = self.group_windows(group_id)
        del self._groups[group_id]
        for window in windows:
            window.group_id = None
            window.is_minimized = False
        return windows

    def _leave_group(self, window: Window) -> None:
        if window.group_id is None or window.group_id not in self._groups:
            window.group_id = None
            return
        group_id = window.group_id
        ids, layout = self._groups[group_id]
        remaining = [i for i in ids if i != window.id]
        window.group_id = None
        if len(remaining) < 2:
            del self._groups[group_id]
            for other in self.windows:
                if other.id in remaining:
                    other.group_id = None
                    other.is_minimized = False
        else:
            self._groups[group_id] = (remaining, layout)

    def groups(self) -> List[Dict[str, Any]]:
        return [
            {"id": group_id, "layout": layout, "window_ids": list(ids)}
            for group_id, (ids, layout) in self._groups.items()
        ]

    # ------------------------------------------------------------------
    # Virtual desktop hooks
    # ------------------------------------------------------------------

    def set_current_desktop(self, desktop_id: str) -> None:
        self.current_desktop_id = desktop_id
        focused = self.focused_window
        if focused is None or focused.desktop_id != desktop_id:
            self._focus_topmost()
        if self.mode == "tiling":
            self.apply_tiling()

    def move_to_desktop(self, window_id: int, desktop_id: str) -> Window:
        window = self.get(window_id)
        window.desktop_id = desktop_id
        if window.is_focused and desktop_id != self.current_desktop_id:
            window.is_focused = False
            self._focus_topmost()
        if self.mode == "tiling":
            self.apply_tiling()
        return window

    def reassign_desktop(self, old_id: str, new_id: str) -> None:
        for window in self.windows:
            if window.desktop_id == old_id:
                window.desktop_id = new_id
        self._tiling_rules.pop(old_id, None)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "viewport": self.viewport.to_dict(),
            "current_desktop_id": self.current_desktop_id,
            "windows": [w.to_dict() for w in sorted(self.windows, key=lambda w: w.z_index)],
            "groups": self.groups(),
        }
