from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from ._async_helper import run_async
from ._credentials import GoogleCredentials
from ._http_helper import build_api_error
from .exceptions import TransportError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset([429, 500, 502, 503, 504])


class Transport:
    """Authenticated HTTP transport.

    Attaches a bearer token to every request and retries
    network failures and transient status codes with
    exponential backoff.
    """

    credentials: GoogleCredentials
    timeout: float | None
    max_retries: int
    backoff_factor: float

    _client: httpx.AsyncClient | None
    _owns_client: bool
    _token_lock: asyncio.Lock | None

    def __init__(
        self,
        credentials: GoogleCredentials,
        timeout: float | None = 60,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize.

        Args:
            credentials:
                Credentials used to mint bearer tokens.
            timeout:
                HTTP timeout. Defaults to 60 seconds.
            max_retries:
                Retries after the first attempt for network
                failures and retryable status codes.
            backoff_factor:
                Delay before retry n is backoff_factor * 2 ** n.
            client:
                HTTP client to use. The transport does not
                close a client it did not create.
        """
        self.credentials = credentials
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._client = client
        self._owns_client = client is None
        self._token_lock = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @property
    def client(self) -> httpx.AsyncClient:
        """HTTP client for requests that need no credentials."""
        return self._get_client()

    async def get_token(self) -> str:
        if self._token_lock is None:
            self._token_lock = asyncio.Lock()
        async with self._token_lock:
            credentials = self.credentials.get_credentials()
            if not credentials.valid:
                logger.debug("Refreshing access token")
                await run_async(self.credentials.refresh)
            return credentials.token

    async def _get_headers(self, headers: dict | None) -> dict:
        token = await self.get_token()
        result = {"Authorization": f"Bearer {token}"}
        if headers:
            result.update(headers)
        return result

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict | None = None,
        headers: dict | None = None,
        content: bytes | str | None = None,
    ) -> httpx.Response:
        """Send a request.

        Returns:
            The response. A retryable status is returned once
            retries are exhausted so the caller can report it.

        Raises:
            TransportError:
                Network failure after retries.
        """
        client = self._get_client()
        request = client.build_request(
            method,
            url,
            json=json,
            params=params,
            headers=await self._get_headers(headers),
            content=content,
        )
        return await self._send_with_retries(request, stream=False)

    async def _send_with_retries(
        self, request: httpx.Request, stream: bool
    ) -> httpx.Response:
        client = self._get_client()
        method = request.method
        url = request.url
        attempt = 0
        while True:
            try:
                response = await client.send(request, stream=stream)
            except httpx.TransportError as e:
                if attempt >= self.max_retries:
                    raise TransportError(
                        f"{method} {url} failed: {e}"
                    ) from e
                logger.warning(
                    "%s %s failed (%s), retry %d of %d",
                    method,
                    url,
                    e,
                    attempt + 1,
                    self.max_retries,
                )
            else:
                if (
                    response.status_code not in RETRYABLE_STATUS_CODES
                    or attempt >= self.max_retries
                ):
                    return response
                logger.warning(
                    "%s %s returned %d, retry %d of %d",
                    method,
                    url,
                    response.status_code,
                    attempt + 1,
                    self.max_retries,
                )
                if stream:
                    await response.aclose()
            await asyncio.sleep(self.backoff_factor * (2**attempt))
            attempt += 1

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict | None = None,
        headers: dict | None = None,
        default_message: str = "Stream request failed",
    ) -> AsyncIterator[httpx.Response]:
        """Open a streaming response.

        Opening the stream is retried like `send`. The response
        is closed when the context exits.

        Raises:
            TransportError:
                Network failure while connecting.
            ApiError:
                Non-2xx status on the initial response.
        """
        client = self._get_client()
        request = client.build_request(
            method,
            url,
            json=json,
            params=params,
            headers=await self._get_headers(headers),
        )
        response = await self._send_with_retries(request, stream=True)
        try:
            if not response.is_success:
                await response.aread()
                raise build_api_error(response, default_message)
            yield response
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
