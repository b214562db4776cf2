import asyncio
import json

import httpx
import pytest

from webtop.services.panel_catalog import build_panels
from webtop.services.panels import PanelValidationError, ResourcePanel, Section, UnknownAction
from webtop.utils.http_client import BackendClient


@pytest.fixture
def panels():
    return build_panels(container_timeout=30.0)


@pytest.fixture
def wifi_backend(backend):
    backend.add("GET", "/api/wifi-management/interfaces", [{"name": "wlan0", "state": "connected"}])
    backend.add("POST", "/api/wifi-management/scan", [{"ssid": "home", "signalStrength": -40}])
    return backend


class TestLoad:
    @pytest.mark.asyncio
    async def test_sections_render_rows(self, panels, wifi_backend, backend_client):
        view = await panels["wifi"].load(backend_client)

        assert view.section("interfaces").rows == ["wlan0 • connected"]
        assert view.section("networks").rows == ["home • -40dBm"]

    @pytest.mark.asyncio
    async def test_failed_section_shows_failure_text(self, panels, backend, backend_client):
        backend.add("GET", "/api/wifi-management/interfaces", {"error": "down"}, status_code=500)
        backend.add("POST", "/api/wifi-management/scan", [])

        view = await panels["wifi"].load(backend_client)

        interfaces = view.section("interfaces")
        assert interfaces.status == "error"
        assert interfaces.message == "Failed to load interfaces"
        networks = view.section("networks")
        assert networks.status == "ready"
        assert networks.message == "No networks"

    @pytest.mark.asyncio
    async def test_no_retries(self, panels, backend, backend_client):
        backend.add("GET", "/api/nginx-proxy/status", {}, status_code=503)

        await panels["proxy"].load(backend_client)

        assert len(backend.calls("GET", "/api/nginx-proxy/status")) == 1

    @pytest.mark.asyncio
    async def test_invalid_json_is_a_failure(self, backend, backend_client):
        backend.add("GET", "/api/x", lambda r: httpx.Response(200, text="<html>"))
        panel = ResourcePanel("x", "X", [Section("x", "X", "/api/x", "Failed to load x")])

        view = await panel.load(backend_client)

        assert view.section("x").message == "Failed to load x"


class TestActions:
    @pytest.mark.asyncio
    async def test_missing_ssid_rejected_before_request(self, panels, wifi_backend, backend_client):
        with pytest.raises(PanelValidationError, match="SSID required"):
            await panels["wifi"].run_action(backend_client, "connect", {"ssid": "  "})

        assert wifi_backend.calls("POST", "/api/wifi-management/connect") == []

    @pytest.mark.asyncio
    async def test_connect_sends_body_and_refreshes(self, panels, wifi_backend, backend_client):
        wifi_backend.add("POST", "/api/wifi-management/connect", {"success": True})

        view = await panels["wifi"].run_action(backend_client, "connect", {"ssid": "home", "password": "pw"})

        sent = wifi_backend.calls("POST", "/api/wifi-management/connect")[0]
        assert json.loads(sent.content) == {"ssid": "home", "password": "pw"}
        assert {s.key for s in view.sections} == {"networks", "interfaces"}
        assert view.notice is None

    @pytest.mark.asyncio
    async def test_connect_backend_500_still_refreshes(self, panels, wifi_backend, backend_client):
        wifi_backend.add("POST", "/api/wifi-management/connect", {"error": "nmcli failed"}, status_code=500)

        view = await panels["wifi"].run_action(backend_client, "connect", {"ssid": "home"})

        assert view.notice == "nmcli failed"
        assert view.section("interfaces").rows == ["wlan0 • connected"]
        assert len(wifi_backend.calls("GET", "/api/wifi-management/interfaces")) == 1

    @pytest.mark.asyncio
    async def test_path_parameters(self, panels, backend, backend_client):
        backend.add("DELETE", "/api/shares/nfs/a b", {"success": True})
        backend.add("GET", "/api/shares/nfs", [])

        await panels["shares"].run_action(backend_client, "delete-nfs", {"id": "a b", "confirmed": True})

        assert len(backend.calls("DELETE", "/api/shares/nfs/a b")) == 1

    @pytest.mark.asyncio
    async def test_unconfirmed_delete_sends_nothing(self, panels, backend, backend_client):
        backend.add("DELETE", "/api/storage-pools/pools/p1", {"success": True})

        view = await panels["storage-pools"].run_action(backend_client, "delete", {"id": "p1"})

        assert backend.calls("DELETE", "/api/storage-pools/pools/p1") == []
        assert view.confirm_action == "delete"
        assert view.notice == "Delete this pool?"
        assert view.sections == []

    @pytest.mark.asyncio
    async def test_declined_delete_sends_nothing(self, panels, backend, backend_client):
        backend.add("DELETE", "/api/shares/smb/s1", {"success": True})

        await panels["shares"].run_action(backend_client, "delete-smb", {"id": "s1", "confirmed": False})

        assert backend.calls("DELETE", "/api/shares/smb/s1") == []

    @pytest.mark.asyncio
    async def test_confirmed_delete_is_sent(self, panels, backend, backend_client):
        backend.add("DELETE", "/api/storage-pools/pools/p1", {"success": True})
        backend.add("GET", "/api/storage-pools/pools", [])
        backend.add("GET", "/api/storage-pools/stats", {})

        view = await panels["storage-pools"].run_action(backend_client, "delete", {"id": "p1", "confirmed": True})

        assert len(backend.calls("DELETE", "/api/storage-pools/pools/p1")) == 1
        assert view.confirm_action is None

    @pytest.mark.asyncio
    async def test_non_destructive_actions_need_no_confirmation(self, panels, wifi_backend, backend_client):
        view = await panels["wifi"].run_action(backend_client, "scan", {})

        assert view.confirm_action is None
        assert len(wifi_backend.calls("POST", "/api/wifi-management/scan")) >= 1

    @pytest.mark.asyncio
    async def test_unknown_action(self, panels, backend_client):
        with pytest.raises(UnknownAction):
            await panels["wifi"].run_action(backend_client, "explode", {})


class TestContainers:
    def test_container_panel_settings(self, panels):
        containers = panels["containers"]
        assert containers.cancel_previous
        assert containers.timeout == 30.0

    @pytest.mark.asyncio
    async def test_new_load_cancels_previous(self):
        release = asyncio.Event()

        async def slow(request):
            await release.wait()
            return httpx.Response(200, json=[{"name": "web", "status": "running"}])

        class SlowTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                return await slow(request)

        client = BackendClient("http://backend.test", transport=SlowTransport())
        panel = build_panels()["containers"]

        first = asyncio.ensure_future(panel.load(client))
        await asyncio.sleep(0)
        second = asyncio.ensure_future(panel.load(client))
        await asyncio.sleep(0)
        release.set()

        first_view, second_view = await asyncio.gather(first, second)
        assert first_view.section("containers").status == "cancelled"
        assert second_view.section("containers").rows == ["web • running"]
        await client.close()
