"""Rectangle math for window layouts.

Every layout works on integer pixels inside the desktop area. Sizes are
floored, so a few pixels at the right/bottom edge may stay unused.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

DEFAULT_GAP = 8
MIN_WIDTH = 300
MIN_HEIGHT = 200

CASCADE_ORIGIN = 50
CASCADE_MAX_WIDTH = 800
CASCADE_MAX_HEIGHT = 600

FOCUS_BACKGROUND_SIZE = 300

# Layout types whose windows never overlap
TILING_TYPES = frozenset({"grid", "vertical", "horizontal", "master-stack", "mosaic"})

SNAP_EDGES = ("left", "right", "top", "bottom")
SNAP_CORNERS = ("top-left", "top-right", "bottom-left", "bottom-right")


@dataclass(frozen=True, slots=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def inset(self, gap: int) -> "Rect":
        return Rect(
            self.x + gap,
            self.y + gap,
            max(0, self.width - 2 * gap),
            max(0, self.height - 2 * gap),
        )

    def overlaps(self, other: "Rect") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def viewport_rect(width: int, height: int) -> Rect:
    return Rect(0, 0, max(0, int(width)), max(0, int(height)))


def divide(rect: Rect, count: int, *, axis: str, gap: int) -> List[Rect]:
    """Split ``rect`` into ``count`` equal cells separated by ``gap``.

    ``axis="columns"`` places cells side by side, ``axis="rows"`` stacks them.
    """
    if count <= 0:
        return []
    if axis == "columns":
        width = max(0, (rect.width - gap * (count - 1)) // count)
        return [Rect(rect.x + i * (width + gap), rect.y, width, rect.height) for i in range(count)]
    height = max(0, (rect.height - gap * (count - 1)) // count)
    return [Rect(rect.x, rect.y + i * (height + gap), rect.width, height) for i in range(count)]


def split(rect: Rect, ratio: float, *, axis: str, gap: int) -> Tuple[Rect, Rect]:
    """Cut ``rect`` in two; the first part gets ``ratio`` of the usable length."""
    if axis == "columns":
        usable = max(0, rect.width - gap)
        first = int(usable * ratio)
        return (
            Rect(rect.x, rect.y, first, rect.height),
            Rect(rect.x + first + gap, rect.y, usable - first, rect.height),
        )
    usable = max(0, rect.height - gap)
    first = int(usable * ratio)
    return (
        Rect(rect.x, rect.y, rect.width, first),
        Rect(rect.x, rect.y + first + gap, rect.width, usable - first),
    )


def _int_option(config: Mapping[str, Any], key: str, default: int, minimum: int = 1) -> int:
    try:
        value = int(config.get(key, default))
    except (TypeError, ValueError):
        value = default
    return max(minimum, value)


def _ratio_option(config: Mapping[str, Any], key: str, default: float) -> float:
    try:
        value = float(config.get(key, default))
    except (TypeError, ValueError):
        value = default
    if math.isnan(value):
        value = default
    return min(0.9, max(0.1, value))


# ---------------------------------------------------------------------------
# Layout functions: (count, bounds, config, gap) -> list of rectangles
# ---------------------------------------------------------------------------

def grid_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Equal ``rows x cols`` cells in row-major order.

    Windows that do not fit share the last cell, which is divided into equal
    horizontal strips.
    """
    if count <= 0:
        return []
    rows = _int_option(config, "rows", 2)
    cols = _int_option(config, "cols", 2)
    area = bounds.inset(gap)
    cells = [
        cell
        for row in divide(area, rows, axis="rows", gap=gap)
        for cell in divide(row, cols, axis="columns", gap=gap)
    ]
    if count <= len(cells):
        return cells[:count]
    overflow = count - len(cells) + 1
    return cells[:-1] + divide(cells[-1], overflow, axis="rows", gap=gap)


def auto_grid_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Grid sized to the window count, used by plain tiling mode."""
    if count <= 0:
        return []
    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    return grid_layout(count, bounds, {"rows": rows, "cols": cols}, gap)


def cascade_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    offset = _int_option(config, "offset", 30, minimum=0)
    width = max(MIN_WIDTH, min(CASCADE_MAX_WIDTH, bounds.width - 200))
    height = max(MIN_HEIGHT, min(CASCADE_MAX_HEIGHT, bounds.height - 100))
    return [
        Rect(bounds.x + CASCADE_ORIGIN + i * offset, bounds.y + CASCADE_ORIGIN + i * offset, width, height)
        for i in range(count)
    ]


def _split_layout(count: int, bounds: Rect, ratio: float, axis: str, gap: int) -> List[Rect]:
    if count <= 0:
        return []
    area = bounds.inset(gap)
    if count == 1:
        return [area]
    first, second = split(area, ratio, axis=axis, gap=gap)
    stack_axis = "rows" if axis == "columns" else "columns"
    return [first] + divide(second, count - 1, axis=stack_axis, gap=gap)


def vertical_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Left/right split; windows after the first stack in the right region."""
    return _split_layout(count, bounds, _ratio_option(config, "ratio", 0.5), "columns", gap)


def horizontal_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Top/bottom split; windows after the first sit side by side below."""
    return _split_layout(count, bounds, _ratio_option(config, "ratio", 0.5), "rows", gap)


def master_stack_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    ratio = _ratio_option(config, "masterRatio", 0.6)
    axis = "rows" if config.get("stackDirection") == "bottom" else "columns"
    return _split_layout(count, bounds, ratio, axis, gap)


def mosaic_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Main window on the left half, the rest in two columns beside it.

    Two windows split 60/40. From three windows on, the right half holds two
    columns filled top to bottom, left column first.
    """
    if count <= 0:
        return []
    area = bounds.inset(gap)
    if count == 1:
        return [area]
    if count == 2:
        return list(split(area, 0.6, axis="columns", gap=gap))
    main, rest = split(area, 0.5, axis="columns", gap=gap)
    per_column = math.ceil((count - 1) / 2)
    cells = [
        cell
        for column in divide(rest, 2, axis="columns", gap=gap)
        for cell in divide(column, per_column, axis="rows", gap=gap)
    ]
    return [main] + cells[: count - 1]


def focus_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """The window at ``focusIndex`` sits centred at half size; the others
    shrink to squares in the four corners, reusing corners past four."""
    if count <= 0:
        return []
    focus_index = config.get("focusIndex")
    if not isinstance(focus_index, int) or isinstance(focus_index, bool):
        focus_index = None
    size = int(min(FOCUS_BACKGROUND_SIZE, bounds.width * 0.2))
    corners = [
        Rect(bounds.x + gap, bounds.y + gap, size, size),
        Rect(bounds.right - size - gap, bounds.y + gap, size, size),
        Rect(bounds.x + gap, bounds.bottom - size - gap, size, size),
        Rect(bounds.right - size - gap, bounds.bottom - size - gap, size, size),
    ]
    centre = Rect(
        bounds.x + bounds.width // 4,
        bounds.y + bounds.height // 4,
        bounds.width // 2,
        bounds.height // 2,
    )
    rects = []
    background = 0
    for i in range(count):
        if i == focus_index:
            rects.append(centre)
        else:
            rects.append(corners[background % len(corners)])
            background += 1
    return rects


def custom_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    """Rectangles captured from an earlier arrangement, applied by position.

    Returns at most ``count`` rectangles; windows past the saved list keep
    their current geometry.
    """
    saved = config.get("windows")
    rects: List[Rect] = []
    for item in saved if isinstance(saved, list) else []:
        try:
            rects.append(Rect(int(item["x"]), int(item["y"]), int(item["width"]), int(item["height"])))
        except (KeyError, TypeError, ValueError):
            continue
    return rects[: max(0, count)]


def full_bleed_layout(count: int, bounds: Rect, config: Mapping[str, Any], gap: int) -> List[Rect]:
    area = bounds.inset(gap)
    return [area] * max(0, count)


LayoutFunc = Callable[[int, Rect, Mapping[str, Any], int], List[Rect]]

LAYOUTS: Dict[str, LayoutFunc] = {
    "grid": grid_layout,
    "cascade": cascade_layout,
    "vertical": vertical_layout,
    "horizontal": horizontal_layout,
    "master-stack": master_stack_layout,
    "mosaic": mosaic_layout,
    "focus": focus_layout,
    "custom": custom_layout,
}


def compute_layout(
    layout_type: str,
    count: int,
    bounds: Rect,
    config: Optional[Mapping[str, Any]] = None,
    gap: int = DEFAULT_GAP,
) -> List[Rect]:
    """Geometry for ``count`` windows; unknown types get the full-bleed rectangle."""
    func = LAYOUTS.get(layout_type, full_bleed_layout)
    return func(count, bounds, config or {}, gap)


def is_tiling_type(layout_type: str) -> bool:
    return layout_type in TILING_TYPES


# ---------------------------------------------------------------------------
# Edge snapping
# ---------------------------------------------------------------------------

def _near_side(low: int, high: int, start: int, end: int, distance: int) -> Optional[int]:
    """0 when ``low`` is near ``start``, 1 when ``high`` is near ``end``."""
    if low <= start + distance:
        return 0
    if high >= end - distance:
        return 1
    return None


def detect_snap_edge(target: Rect, bounds: Rect, threshold: int, gap: int = DEFAULT_GAP) -> Optional[str]:
    """Return the viewport edge or corner ``target`` was dragged onto, if any.

    Corners are checked first, with a zone twice the edge threshold.
    """
    corner = 2 * threshold
    column = _near_side(target.x, target.right, bounds.x + gap, bounds.right - gap, corner)
    row = _near_side(target.y, target.bottom, bounds.y + gap, bounds.bottom - gap, corner)
    if column is not None and row is not None:
        return f"{('top', 'bottom')[row]}-{('left', 'right')[column]}"

    column = _near_side(target.x, target.right, bounds.x + gap, bounds.right - gap, threshold)
    if column is not None:
        return ("left", "right")[column]
    row = _near_side(target.y, target.bottom, bounds.y + gap, bounds.bottom - gap, threshold)
    if row is not None:
        return ("top", "bottom")[row]
    return None


def snap_rect(edge: str, bounds: Rect, gap: int = DEFAULT_GAP) -> Rect:
    """Half of the desktop area next to an edge, or the quarter in a corner."""
    if edge not in SNAP_EDGES and edge not in SNAP_CORNERS:
        raise ValueError(f"Unknown snap edge: {edge}")
    area = bounds.inset(gap)
    if edge in SNAP_CORNERS:
        vertical, horizontal = edge.split("-")
        top, bottom = split(area, 0.5, axis="rows", gap=gap)
        row = top if vertical == "top" else bottom
        left, right = split(row, 0.5, axis="columns", gap=gap)
        return left if horizontal == "left" else right
    if edge in ("left", "right"):
        left, right = split(area, 0.5, axis="columns", gap=gap)
        return left if edge == "left" else right
    top, bottom = split(area, 0.5, axis="rows", gap=gap)
    return top if edge == "top" else bottom
