"""
HTTP transport for carrier APIs.
Wraps an aiohttp session bound to a provider base URI.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import aiohttp
import orjson
from loguru import logger

from shipping_gateway.errors import TransportError, HttpStatusError, ProtocolError


HeaderHook = Callable[[dict[str, str]], dict[str, str]]


@dataclass
class HttpResponse:
    """Response of a completed HTTP exchange."""

    status: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Decode the body; an empty body decodes to None."""
        if not self.body:
            return None
        try:
            return orjson.loads(self.body)
        except orjson.JSONDecodeError as e:
            raise ProtocolError(f"Response body is not valid JSON: {e}", payload=self.body) from e


class HttpClient:
    """
    Async HTTP client for a single provider.

    Features:
    - Lazily created, shared aiohttp session
    - Per-request header shaping through a header hook
    - Network/timeout failures raised as TransportError,
      non-2xx answers raised as HttpStatusError
    """

    def __init__(
        self,
        base_uri: str,
        timeout: float = 10.0,
        header_hook: Optional[HeaderHook] = None,
    ):
        self.base_uri = base_uri if base_uri.endswith("/") else base_uri + "/"
        self.timeout = timeout
        self.header_hook = header_hook

        self._session: Optional[aiohttp.ClientSession] = None

    def url_for(self, path: str) -> str:
        return self.base_uri + path.lstrip("/")

    async def _ensure_session(self):
        """Ensure HTTP session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self):
        """Close HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def get(self, path: str, headers: Optional[dict[str, str]] = None) -> HttpResponse:
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> HttpResponse:
        return await self.request("POST", path, json=json, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> HttpResponse:
        """Perform one request and return the response."""
        await self._ensure_session()

        request_headers = dict(headers or {})
        if self.header_hook:
            request_headers = self.header_hook(request_headers)

        data = None
        if json is not None:
            data = orjson.dumps(json)
            request_headers.setdefault("Content-Type", "application/json")

        url = self.url_for(path)

        try:
            async with self._session.request(
                method, url, data=data, headers=request_headers
            ) as resp:
                body = await resp.text()
                response = HttpResponse(
                    status=resp.status,
                    body=body,
                    headers=dict(resp.headers),
                )
        except asyncio.TimeoutError as e:
            logger.warning(f"{method} {url} timed out after {self.timeout}s")
            raise TransportError(f"{method} {url} timed out") from e
        except aiohttp.ClientError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not 200 <= response.status < 300:
            raise HttpStatusError(
                f"{method} {url} returned {response.status}",
                status=response.status,
                body=response.body,
            )

        return response
