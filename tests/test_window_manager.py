import itertools

import pytest

from webtop.services.geometry import Rect
from webtop.services.window_manager import (
    GroupNotFound,
    LayoutModeError,
    WindowManager,
    WindowManagerError,
    WindowNotFound,
)


@pytest.fixture
def floating():
    return WindowManager(1920, 1040, gap=8, mode="floating")


def _focused(wm):
    return [w for w in wm.windows if w.is_focused]


class TestLifecycle:
    def test_create_assigns_ids_and_z_order(self, floating):
        first = floating.create_window("One")
        second = floating.create_window("Two")

        assert (first.id, second.id) == (1, 2)
        assert first.z_index == 100
        assert second.z_index > first.z_index
        assert _focused(floating) == [second]

    def test_default_geometry_in_floating_mode(self, floating):
        floating.create_window("One")
        second = floating.create_window("Two")

        assert (second.x, second.y, second.width, second.height) == (120, 80, 800, 600)

    def test_window_count_tracks_creates_and_closes(self, window_manager):
        ids = [window_manager.create_window(f"W{i}").id for i in range(5)]
        window_manager.close_window(ids[1])
        window_manager.close_window(ids[3])

        assert len(window_manager.windows) == 3

    def test_ids_are_not_reused(self, window_manager):
        window = window_manager.create_window("One")
        window_manager.close_window(window.id)

        assert window_manager.create_window("Two").id == 2

    def test_close_moves_focus_to_topmost(self, floating):
        a = floating.create_window("A")
        b = floating.create_window("B")
        c = floating.create_window("C")
        floating.focus_window(a.id)
        floating.focus_window(c.id)

        floating.close_window(c.id)

        assert _focused(floating) == [a]
        assert b.is_focused is False

    def test_close_unknown_window(self, window_manager):
        with pytest.raises(WindowNotFound):
            window_manager.close_window(42)

    def test_is_running_ignores_case(self, window_manager):
        window_manager.create_window("Firefox")

        assert window_manager.is_running("firefox")
        assert not window_manager.is_running("GIMP")


class TestFocus:
    def test_focus_raises_window(self, floating):
        a = floating.create_window("A")
        b = floating.create_window("B")

        floating.focus_window(a.id)

        assert a.z_index > b.z_index
        assert _focused(floating) == [a]

    def test_z_indices_stay_unique(self, floating):
        windows = [floating.create_window(str(i)) for i in range(4)]
        for window in windows[::-1]:
            floating.focus_window(window.id)

        z = [w.z_index for w in floating.windows]
        assert len(set(z)) == len(z)

    def test_focus_restores_minimized(self, window_manager):
        a = window_manager.create_window("A")
        window_manager.create_window("B")
        window_manager.minimize_window(a.id)

        window_manager.focus_window(a.id)

        assert a.is_minimized is False
        assert a.is_focused

    def test_focus_cycle(self, floating):
        a = floating.create_window("A")
        b = floating.create_window("B")
        c = floating.create_window("C")

        assert floating.focus_next() is a
        assert floating.focus_next() is b
        assert floating.focus_previous() is a
        assert floating.focus_previous() is c

    def test_focus_cycle_without_windows(self, window_manager):
        assert window_manager.focus_next() is None


class TestStateToggles:
    def test_minimize_toggles_and_retiles(self, window_manager):
        a = window_manager.create_window("A")
        b = window_manager.create_window("B")

        window_manager.minimize_window(a.id)
        assert a.is_minimized
        assert b.rect == window_manager.viewport.inset(8)

        window_manager.minimize_window(a.id)
        assert not a.is_minimized

    def test_maximize_restores_previous_geometry(self, floating):
        window = floating.create_window("A")
        before = window.rect

        floating.maximize_window(window.id)
        assert window.is_maximized
        assert window.rect == floating.viewport.inset(8)

        floating.maximize_window(window.id)
        assert not window.is_maximized
        assert window.rect == before

    def test_center(self, floating):
        window = floating.create_window("A")
        floating.center_window(window.id)

        assert (window.x, window.y) == (560, 220)


class TestMoveResize:
    def test_move_rejected_in_tiling_mode(self, window_manager):
        window = window_manager.create_window("A")
        with pytest.raises(LayoutModeError):
            window_manager.move_window(window.id, 300, 300)

    def test_move_without_snap(self, floating):
        window = floating.create_window("A")
        floating.move_window(window.id, 400, 200)

        assert (window.x, window.y) == (400, 200)
        assert not window.is_snapped

    def test_move_snaps_to_left_half(self, floating):
        window = floating.create_window("A")
        floating.move_window(window.id, 5, 300)

        assert window.is_snapped and window.snap_edge == "left"
        assert (window.x, window.y, window.height) == (8, 8, 1024)

    def test_move_snaps_to_corner_quarter(self, floating):
        window = floating.create_window("A")
        floating.move_window(window.id, 5, 10)

        assert window.snap_edge == "top-left"
        assert window.rect == Rect(8, 8, 948, 508)

    def test_snap_can_be_disabled(self):
        wm = WindowManager(1920, 1040, mode="floating", snap_enabled=False)
        window = wm.create_window("A")
        wm.move_window(window.id, 5, 300)

        assert (window.x, window.y) == (5, 300)

    def test_resize_east_and_south(self, floating):
        window = floating.create_window("A")
        floating.resize_window(window.id, "se", 100, 50)

        assert (window.width, window.height) == (900, 650)

    def test_resize_west_keeps_right_edge(self, floating):
        window = floating.create_window("A")
        right = window.rect.right

        floating.resize_window(window.id, "w", 100, 0)

        assert window.width == 700
        assert window.rect.right == right

    def test_resize_clamps_to_minimum(self, floating):
        window = floating.create_window("A")
        bottom = window.rect.bottom

        floating.resize_window(window.id, "n", 0, 2000)

        assert window.height == 200
        assert window.rect.bottom == bottom


class TestModes:
    def test_toggle_twice_is_identity(self, window_manager):
        original = window_manager.mode
        window_manager.toggle_mode()
        assert window_manager.mode != original
        window_manager.toggle_mode()
        assert window_manager.mode == original

    def test_tiling_has_no_overlap(self, window_manager):
        for i in range(7):
            window_manager.create_window(f"W{i}")

        rects = [w.rect for w in window_manager.windows]
        assert not any(a.overlaps(b) for a, b in itertools.combinations(rects, 2))

    def test_apply_tiling_noop_when_floating(self, floating):
        floating.create_window("A")
        assert floating.apply_tiling() == []

    def test_entering_tiling_retiles(self, floating):
        a = floating.create_window("A")
        floating.create_window("B")

        floating.set_mode("tiling")

        assert a.x == 8 and a.y == 8
        assert a.height == 1024

    def test_viewport_change_retiles(self, window_manager):
        window = window_manager.create_window("A")
        window_manager.set_viewport(1280, 720)

        assert window.rect == window_manager.viewport.inset(8)
        assert window.width == 1264

    def test_tiling_rule_overrides_auto_grid(self, window_manager):
        window_manager.set_tiling_rule("vertical", {"ratio": 0.5})
        a = window_manager.create_window("A")
        b = window_manager.create_window("B")
        c = window_manager.create_window("C")

        assert b.x == c.x > a.x


class TestFocusLayout:
    def test_focused_window_is_centred(self, floating):
        a = floating.create_window("A")
        b = floating.create_window("B")
        c = floating.create_window("C")
        floating.focus_window(b.id)

        floating.arrange("focus")

        assert b.rect == Rect(480, 260, 960, 520)
        assert a.rect == Rect(8, 8, 300, 300)
        assert c.rect == Rect(1612, 8, 300, 300)


class TestGroups:
    def test_tabs_show_one_member(self, floating):
        a, b, c = (floating.create_window(t) for t in "ABC")

        group_id = floating.create_group([a.id, b.id, c.id], "tabs")

        assert {w.group_id for w in (a, b, c)} == {group_id}
        assert a.rect == b.rect == c.rect == Rect(8, 38, 1904, 994)
        assert not a.is_minimized and a.is_focused
        assert b.is_minimized and c.is_minimized

    def test_activate_switches_tab(self, floating):
        a, b = floating.create_window("A"), floating.create_window("B")
        group_id = floating.create_group([a.id, b.id])

        floating.activate_in_group(group_id, b.id)

        assert a.is_minimized and not b.is_minimized
        assert b.is_focused

    def test_stack_offsets_and_order(self, floating):
        a, b, c = (floating.create_window(t) for t in "ABC")

        floating.create_group([a.id, b.id, c.id], "stack")

        assert [(w.x, w.y) for w in (a, b, c)] == [(8, 8), (28, 28), (48, 48)]
        assert a.z_index < b.z_index < c.z_index
        assert c.is_focused

    def test_tiles_do_not_overlap(self, floating):
        windows = [floating.create_window(t) for t in "ABC"]
        group_id = floating.create_group([w.id for w in windows], "tabs")

        floating.arrange_group(group_id, "tiles")

        assert not any(w.is_minimized for w in windows)
        assert not any(x.rect.overlaps(y.rect) for x, y in itertools.combinations(windows, 2))
        assert floating.group_layout(group_id) == "tiles"

    def test_closing_member_dissolves_pair(self, floating):
        a, b = floating.create_window("A"), floating.create_window("B")
        group_id = floating.create_group([a.id, b.id])

        floating.close_window(a.id)

        assert b.group_id is None and not b.is_minimized
        with pytest.raises(GroupNotFound):
            floating.group_windows(group_id)

    def test_ungroup_restores_members(self, floating):
        a, b = floating.create_window("A"), floating.create_window("B")
        group_id = floating.create_group([a.id, b.id])

        floating.ungroup(group_id)

        assert floating.groups() == []
        assert a.group_id is None and not b.is_minimized

    def test_group_needs_two_windows(self, floating):
        a = floating.create_window("A")
        with pytest.raises(WindowManagerError):
            floating.create_group([a.id, a.id])

    def test_groups_rejected_in_tiling_mode(self, window_manager):
        a, b = window_manager.create_window("A"), window_manager.create_window("B")
        with pytest.raises(LayoutModeError):
            window_manager.create_group([a.id, b.id])
