"""
Test configuration and fixtures for the Webtop desktop shell tests.

The backend API is simulated with ``httpx.MockTransport``; every test gets
its own data directory so stored layouts and preferences never leak.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

# Importing webtop.main builds the module-level app; keep it off the disk.
os.environ.setdefault("LOG_TO_FILES", "false")
os.environ.setdefault("DATA_DIR", "")

import httpx
import pytest
from fastapi.testclient import TestClient

from webtop.config import Settings
from webtop.main import create_app
from webtop.services.app_registry import AppRegistry
from webtop.services.launcher import Launcher
from webtop.services.window_manager import WindowManager
from webtop.utils.http_client import BackendClient

Route = Tuple[str, str]
Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Routes (method, path) to canned responses and records requests."""

    def __init__(self) -> None:
        self.routes: Dict[Route, Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: Any, status_code: int = 200) -> None:
        if callable(response):
            self.routes[(method.upper(), path)] = response
        else:
            self.routes[(method.upper(), path)] = httpx.Response(status_code, json=response)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tempdir:
        yield Path(tempdir)


@pytest.fixture
def test_settings(temp_dir) -> Settings:
    return Settings(
        BACKEND_URL="http://backend.test",
        DATA_DIR=str(temp_dir),
        LOG_TO_FILES=False,
        VIEWPORT_WIDTH=1920,
        VIEWPORT_HEIGHT=1040,
        DEFAULT_LAYOUT_MODE="tiling",
    )


@pytest.fixture
def backend() -> FakeBackend:
    fake = FakeBackend()
    fake.add("GET", "/api/packages/installed", {"apps": []})
    return fake


@pytest.fixture
def backend_client(backend) -> BackendClient:
    return BackendClient("http://backend.test", transport=backend.transport)


@pytest.fixture
def window_manager() -> WindowManager:
    return WindowManager(1920, 1040, gap=8, mode="tiling")


@pytest.fixture
def launcher(window_manager, backend_client) -> Launcher:
    return Launcher(window_manager, AppRegistry(), backend_client)


@pytest.fixture
def app(test_settings, backend):
    return create_app(test_settings, transport=backend.transport)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
