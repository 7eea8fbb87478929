"""
HTTP transport for the Gamplo API.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from gamplo.chat.cancellation import CancellationToken
from gamplo.exceptions import TransportError
from gamplo.models import GamploConfig

logger = logging.getLogger(__name__)


class StreamResponse:
    """
    An open streaming response whose body is read chunk by chunk.
    """

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response

    @property
    def ok(self) -> bool:
        return 200 <= self._response.status < 300

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def reason(self) -> Optional[str]:
        return self._response.reason

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """
        Yield body chunks as they arrive.

        Raises:
            TransportError: If the connection fails mid-stream
        """
        try:
            async for chunk in self._response.content.iter_any():
                yield chunk
        except aiohttp.ClientError as e:
            raise TransportError(f"Stream read failed: {e}")

    def release(self) -> None:
        """Close the response and its connection."""
        self._response.close()


class HttpClient:
    """
    JSON request/response client plus streaming GET, sharing one session.
    """

    def __init__(self, config: Optional[GamploConfig] = None):
        config = config or GamploConfig()
        self._base_url = config.api_url.rstrip("/")
        self._timeout_ms = config.timeout_ms
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def url(self, path: str) -> str:
        """Resolve a path against the API base URL; absolute URLs pass through."""
        if path.startswith("http"):
            return path
        return f"{self._base_url}{path}"

    async def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        return await self.request("POST", path, body=body, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send a JSON request and return the decoded JSON response.

        Raises:
            TransportError: On non-2xx status, network error, timeout or a
                body that is not JSON
        """
        url = self.url(path)
        request_headers = {"Content-Type": "application/json", **(headers or {})}
        timeout = aiohttp.ClientTimeout(total=self._timeout_ms / 1000.0)

        logger.debug(f"{method} {url}")

        try:
            session = self._get_session()
            async with session.request(
                method,
                url,
                json=body,
                headers=request_headers,
                timeout=timeout,
            ) as response:
                if not 200 <= response.status < 300:
                    message = f"HTTP {response.status}"
                    try:
                        message += f": {await response.text()}"
                    except aiohttp.ClientError:
                        pass
                    raise TransportError(message, status=response.status)

                return await response.json(content_type=None)

        except asyncio.TimeoutError:
            raise TransportError(f"Request timeout after {self._timeout_ms}ms")
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}")
        except ValueError as e:
            # Body was not JSON
            raise TransportError(f"Network error: {e}")

    async def open_stream(
        self,
        url: str,
        token: Optional[CancellationToken] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> StreamResponse:
        """
        Open a long-lived GET request for streaming.

        Only connecting is bounded by the configured timeout; reads may wait
        indefinitely. Cancelling the task that awaits this (see
        CancellationToken.bind) aborts the request.

        Raises:
            ConnectionCancelledError: If `token` is already cancelled
            TransportError: On network error or connect timeout
        """
        if token is not None:
            token.raise_if_cancelled()

        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self._timeout_ms / 1000.0,
            sock_read=None,
        )

        try:
            response = await self._get_session().get(
                self.url(url),
                headers={"Accept": "text/event-stream", **(headers or {})},
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise TransportError(f"Connection timeout after {self._timeout_ms}ms")
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}")

        return StreamResponse(response)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def base_url(self) -> str:
        return self._base_url
