"""
Tests for the backend HTTP client.

Covers retry logic, timeouts, JSON decoding and error extraction.
"""

import json

import pytest
from unittest.mock import AsyncMock, Mock, patch
import httpx

from webtop.utils.http import extract_http_error
from webtop.utils.http_client import BackendClient


class TestBackendClient:
    """Test suite for BackendClient with retry logic and error handling."""

    @pytest.fixture
    def backend_client(self):
        return BackendClient(base_url="https://example.com", timeout=30.0, retries=3, backoff=(0,))

    @pytest.mark.asyncio
    async def test_post_request_success(self, backend_client):
        with patch.object(backend_client, "_client", new_callable=AsyncMock) as mock_client:
            mock_response = Mock()
            mock_response.status_code = 201
            mock_response.json.return_value = {"id": "123", "status": "created"}
            mock_response.raise_for_status = Mock()
            mock_client.request.return_value = mock_response

            data = await backend_client.request_json("POST", "/api", {"name": "test"})

            assert data == {"id": "123", "status": "created"}
            mock_client.request.assert_called_once()

    @pytest.mark.asyncio
    async def test_network_error_with_retry(self, backend_client):
        with patch.object(backend_client, "_client", new_callable=AsyncMock) as mock_client:
            mock_client.request.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(httpx.ConnectError):
                await backend_client.request_json("POST", "/api", {"test": "data"})

            assert mock_client.request.call_count == 4

    @pytest.mark.asyncio
    async def test_non_retryable_status_raises_immediately(self, backend_client):
        with patch.object(backend_client, "_client", new_callable=AsyncMock) as mock_client:
            mock_response = Mock()
            mock_response.status_code = 404
            mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "missing", request=Mock(), response=mock_response
            )
            mock_client.request.return_value = mock_response

            with pytest.raises(httpx.HTTPStatusError):
                await backend_client.request_json("GET", "/missing")

            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_default_is_single_attempt(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        bc = BackendClient("https://example.com", transport=httpx.MockTransport(handler))
        with pytest.raises(httpx.HTTPStatusError):
            await bc.request_json("GET", "/flaky")
        assert len(calls) == 1
        await bc.close()

    @pytest.mark.asyncio
    async def test_request_json(self):
        def handler(request):
            if request.url.path == "/empty":
                return httpx.Response(204)
            return httpx.Response(200, json={"echo": request.content.decode()})

        bc = BackendClient("https://example.com", transport=httpx.MockTransport(handler))
        assert await bc.request_json("DELETE", "/empty") is None
        data = await bc.request_json("post", "/echo", {"a": 1})
        assert json.loads(data["echo"]) == {"a": 1}
        await bc.close()


class TestExtractHttpError:
    def _response(self, **kwargs):
        return httpx.Response(400, request=httpx.Request("GET", "https://x"), **kwargs)

    def test_error_string(self):
        assert extract_http_error(self._response(json={"success": False, "error": "nope"})) == ("nope", "backend_error")

    def test_nested_error(self):
        response = self._response(json={"error": {"message": "bad", "code": "bad_input"}})
        assert extract_http_error(response) == ("bad", "bad_input")

    def test_detail_string(self):
        assert extract_http_error(self._response(json={"detail": "missing"}))[0] == "missing"

    def test_plain_text(self):
        assert extract_http_error(self._response(text="gateway down"))[0] == "gateway down"

    def test_none(self):
        assert extract_http_error(None) == ("Backend request failed", "backend_error")
