import json
import logging

import httpx
import pytest

from webtop.services.app_catalog import BUILTIN_APPS
from webtop.services.app_registry import AppRegistry
from webtop.services.launcher import Launcher


async def _opener():
    return "<p>hello</p>"


@pytest.fixture
def registry():
    reg = AppRegistry()
    reg.register("notes", "Notes", _opener)
    return reg


@pytest.fixture
def launcher(window_manager, registry, backend_client):
    return Launcher(window_manager, registry, backend_client)


class TestLists:
    @pytest.mark.asyncio
    async def test_installed_includes_backend_apps(self, launcher, backend):
        backend.add("GET", "/api/packages/installed", {"apps": [{"name": "Firefox", "categories": ["Network"]}]})

        apps = await launcher.refresh_installed()

        assert len(apps) == len(BUILTIN_APPS) + 1
        assert apps[-1].id == "Firefox"
        assert apps[-1].icon == "🖥️"

    @pytest.mark.asyncio
    async def test_installed_falls_back_to_catalog(self, launcher, backend):
        backend.add("GET", "/api/packages/installed", {"error": "boom"}, status_code=500)

        apps = await launcher.refresh_installed()

        assert [a.id for a in apps] == [a.id for a in BUILTIN_APPS]

    @pytest.mark.asyncio
    async def test_available_tab_triggers_default_search(self, launcher, backend):
        backend.add("GET", "/api/packages/search", {"packages": [{"name": "gimp", "description": "Image editor"}]})

        results = await launcher.switch_tab("available")

        calls = backend.calls("GET", "/api/packages/search")
        assert calls[0].url.params["q"] == "firefox gimp vlc"
        assert [a.name for a in results] == ["gimp"]

    @pytest.mark.asyncio
    async def test_available_search_failure_leaves_empty_list(self, launcher, backend):
        backend.add("GET", "/api/packages/search", {}, status_code=503)

        assert await launcher.switch_tab("available") == []


class TestSearch:
    @pytest.mark.asyncio
    async def test_open_resets_state(self, launcher):
        launcher.search("term")
        launcher.selected_index = 3

        await launcher.open()

        assert launcher.visible
        assert launcher.search_filter == ""
        assert launcher.selected_index == 0
        assert len(launcher.results) == len(BUILTIN_APPS)

    def test_search_is_idempotent(self, launcher):
        first = [a.id for a in launcher.search("mon")]
        assert [a.id for a in launcher.search("mon")] == first

    def test_blank_search_is_not_truncated(self, launcher):
        launcher.result_limit = 3
        assert len(launcher.search("")) == len(BUILTIN_APPS)

    def test_results_capped(self, launcher):
        launcher.result_limit = 2
        assert len(launcher.search("e")) <= 2

    def test_running_apps_first(self, launcher, window_manager):
        window_manager.create_window("Power")
        results = launcher.search("o")

        running = [a.id for a in results if launcher.is_app_running(a)]
        assert running == ["power"]
        assert results[0].id == "power"


class TestKeys:
    @pytest.mark.asyncio
    async def test_arrows_clamp(self, launcher):
        await launcher.open()
        launcher.search("terminal")
        count = len(launcher.results)

        for _ in range(count + 3):
            await launcher.handle_key("ArrowDown")
        assert launcher.selected_index == count - 1

        for _ in range(count + 3):
            await launcher.handle_key("ArrowUp")
        assert launcher.selected_index == 0

    @pytest.mark.asyncio
    async def test_alt_space_opens_and_escape_closes(self, launcher):
        result = await launcher.handle_key(" ", alt=True)
        assert result.action == "opened" and launcher.visible

        result = await launcher.handle_key("Escape")
        assert result.action == "closed" and not launcher.visible

    @pytest.mark.asyncio
    async def test_keys_ignored_when_hidden(self, launcher):
        assert (await launcher.handle_key("Enter")).action == "none"

    @pytest.mark.asyncio
    async def test_enter_launches_and_closes(self, launcher, window_manager):
        await launcher.open()
        launcher.search("Notes")

        result = await launcher.handle_key("Enter")

        assert result.action == "launched"
        assert result.window.title == "Notes"
        assert window_manager.is_running("notes")
        assert not launcher.visible

    @pytest.mark.asyncio
    async def test_enter_on_available_asks_for_confirmation(self, launcher, backend):
        backend.add("GET", "/api/packages/search", {"packages": [{"name": "vlc"}]})
        await launcher.open()
        await launcher.switch_tab("available")

        result = await launcher.handle_key("Enter")

        assert result.action == "confirm-install"
        assert result.package == "vlc"
        assert backend.calls("POST", "/api/packages/install") == []


class TestLaunchInstall:
    @pytest.mark.asyncio
    async def test_launch_focuses_existing(self, launcher, window_manager):
        first = await launcher.launch("notes")
        window_manager.create_window("Other")

        again = await launcher.launch("notes")

        assert again is first
        assert len(window_manager.windows) == 2
        assert first.is_focused

    @pytest.mark.asyncio
    async def test_unknown_app_gets_placeholder(self, launcher):
        window = await launcher.launch("mystery")

        assert window.title == "mystery"
        assert "mystery" in window.content

    @pytest.mark.asyncio
    async def test_unconfirmed_install_sends_nothing(self, launcher, backend):
        result = await launcher.install_package("vlc", confirmed=False)

        assert result.status == "cancelled"
        assert backend.calls("POST", "/api/packages/install") == []

    @pytest.mark.asyncio
    async def test_install_success_refreshes_installed(self, launcher, backend):
        backend.add("POST", "/api/packages/install", {"success": True})
        backend.add("GET", "/api/packages/installed", {"apps": [{"id": "vlc", "name": "VLC"}]})

        result = await launcher.install_package("vlc", confirmed=True)

        assert result.status == "installed"
        sent = backend.calls("POST", "/api/packages/install")[0]
        assert json.loads(sent.content) == {"packageName": "vlc"}
        assert launcher.installed_apps[-1].id == "vlc"

    @pytest.mark.asyncio
    async def test_install_failure_reports_backend_error(self, launcher, backend):
        backend.add("POST", "/api/packages/install", {"success": False, "error": "dpkg locked"})

        result = await launcher.install_package("vlc", confirmed=True)

        assert result.status == "failed"
        assert result.message == "dpkg locked"

    @pytest.mark.asyncio
    async def test_install_http_error(self, launcher, backend):
        backend.add("POST", "/api/packages/install", lambda r: httpx.Response(500, json={"error": "sudo denied"}))

        result = await launcher.install_package("vlc", confirmed=True)

        assert result.status == "failed"
        assert result.message == "sudo denied"


def test_placeholder_resolution_logs_under_registry(registry, caplog):
    with caplog.at_level(logging.INFO):
        handler = registry.resolve("mystery")

    assert handler.title == "mystery"
    assert [r.name for r in caplog.records if "No handler" in r.getMessage()] == ["webtop.registry"]
