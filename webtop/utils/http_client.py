from __future__ import annotations
import asyncio
import logging
from typing import Any, Optional, Tuple

import httpx

logger = logging.getLogger("webtop.http")

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)
RETRY_BACKOFF: Tuple[int, ...] = (1, 2, 4)  # seconds
RETRYABLE_STATUS = (408, 429, 500, 502, 503, 504)
RETRYABLE_EXC = (httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError)

class BackendClient:
    """
    JSON client for the desktop backend API.

    Panels never retry on their own: ``retries`` defaults to 0, so the first
    failure is final for that render cycle. Operators can opt in to retries
    for flaky backends through ``BACKEND_RETRIES``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        retries: int = 0,
        backoff: Tuple[int, ...] = RETRY_BACKOFF,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not isinstance(timeout, httpx.Timeout):
            timeout = httpx.Timeout(timeout)
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=self.timeout,
            follow_redirects=True,
            headers=headers or {},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, *, name: Optional[str] = None, **kwargs) -> httpx.Response:
        name = name or method.upper()
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        retries = kwargs.pop("retries", self.retries)

        for attempt in range(retries):
            try:
                resp = await self._client.request(method, url, **kwargs)
                resp.raise_for_status()
                return resp
            except httpx.HTTPStatusError as e:
                if e.response.status_code not in RETRYABLE_STATUS:
                    raise
            except RETRYABLE_EXC:
                pass

            delay = self.backoff[min(attempt, len(self.backoff) - 1)]
            logger.warning("Retrying %s attempt=%d delay=%ss url=%s", name, attempt + 1, delay, url)
            await asyncio.sleep(delay)

        # Final attempt, errors propagate to the caller
        resp = await self._client.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp

    async def request_json(self, method: str, url: str, payload: Any = None, **kwargs) -> Any:
        """Send a request and decode the JSON body (``None`` for empty bodies)."""
        if payload is not None:
            kwargs["json"] = payload
        resp = await self._request(method.upper(), url, **kwargs)
        if not resp.content:
            return None
        return resp.json()


__all__ = ["BackendClient", "DEFAULT_TIMEOUT", "RETRY_BACKOFF"]
