"""
Listen stream.

The listen endpoint writes JSON messages back to back on a single
response body with no framing. Messages are split off the front of
a byte buffer by tracking nesting depth outside of strings.
"""

from __future__ import annotations

__all__ = ["JsonBoundaryScanner", "ListenStream"]

import json
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, AsyncIterator, Callable

import httpx
from pydantic import ValidationError

from fbadmin.core.exceptions import (
    IncompleteMessageError,
    SerializationError,
    TransportError,
)

from ._models import ListenResponse

logger = logging.getLogger(__name__)

_WHITESPACE = b" \t\n\r\x0b\x0c"
_SEPARATORS = _WHITESPACE + b","


class JsonBoundaryScanner:
    """Finds the end of the first JSON value in a buffer.

    Attributes:
        depth: Open braces and brackets.
        in_string: Inside a quoted string.
        escape: Next character is escaped.
        started: An opening brace or bracket was seen.
    """

    depth: int
    in_string: bool
    escape: bool
    started: bool

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.depth = 0
        self.in_string = False
        self.escape = False
        self.started = False

    def find_boundary(self, buffer: bytes | bytearray) -> int | None:
        """Length of the first complete top level value.

        Leading whitespace is part of the returned length.

        Returns:
            Index one past the closing brace or bracket,
            or None if the buffer has no complete value.
        """
        self.reset()
        start = 0
        while start < len(buffer) and buffer[start] in _WHITESPACE:
            start += 1
        if start == len(buffer):
            return None

        for i in range(start, len(buffer)):
            c = buffer[i]
            if self.in_string:
                if self.escape:
                    self.escape = False
                elif c == 0x5C:  # \
                    self.escape = True
                elif c == 0x22:  # "
                    self.in_string = False
            elif c == 0x7B or c == 0x5B:  # { [
                self.started = True
                self.depth += 1
            elif c == 0x7D or c == 0x5D:  # } ]
                if self.started:
                    self.depth -= 1
                    if self.depth == 0:
                        return i + 1
            elif c == 0x22 and self.started:
                self.in_string = True
        return None


class ListenStream(AsyncIterator[ListenResponse]):
    """Async iterator of listen events.

    Use as an async context manager, or call aclose() when
    done, to release the connection. Closing the stream
    discards buffered bytes without an error.
    """

    _open: Callable[[], AbstractAsyncContextManager[httpx.Response]] | None
    _context: AbstractAsyncContextManager[httpx.Response] | None
    _chunks: AsyncIterator[bytes] | None
    _buffer: bytearray
    _pending: list[Any]
    _scanner: JsonBoundaryScanner
    _closed: bool
    _ended: bool

    def __init__(
        self,
        open: (
            Callable[[], AbstractAsyncContextManager[httpx.Response]] | None
        ) = None,
        chunks: AsyncIterator[bytes] | None = None,
    ):
        """Initialize.

        Args:
            open:
                Opens the streaming response. Called
                on the first iteration.
            chunks:
                Byte chunks to read instead of opening a response.
        """
        self._open = open
        self._context = None
        self._chunks = chunks
        self._buffer = bytearray()
        self._pending = []
        self._scanner = JsonBoundaryScanner()
        self._closed = False
        self._ended = False

    def __aiter__(self) -> ListenStream:
        return self

    async def __anext__(self) -> ListenResponse:
        while True:
            if self._pending:
                return self._parse_message(self._pending.pop(0))
            if self._closed or self._ended:
                raise StopAsyncIteration

            boundary = self._scanner.find_boundary(self._buffer)
            if boundary is not None:
                data = bytes(self._buffer[:boundary])
                del self._buffer[:boundary]
                self._queue(data)
                continue

            chunk = await self._next_chunk()
            if chunk is None:
                self._ended = True
                leftover = bytes(self._buffer).strip(_SEPARATORS)
                self._buffer.clear()
                await self._close_response()
                if leftover:
                    raise IncompleteMessageError(
                        "Stream ended with incomplete message"
                    )
                raise StopAsyncIteration
            self._buffer.extend(chunk)

    def _queue(self, data: bytes) -> None:
        data = data.lstrip(_SEPARATORS)
        if not data:
            return
        try:
            message = json.loads(data)
        except ValueError as e:
            raise SerializationError(f"Invalid listen message: {e}") from e
        if isinstance(message, list):
            self._pending.extend(message)
        else:
            self._pending.append(message)

    def _parse_message(self, message: Any) -> ListenResponse:
        try:
            return ListenResponse.model_validate(message)
        except ValidationError as e:
            raise SerializationError(f"Invalid listen message: {e}") from e

    async def _next_chunk(self) -> bytes | None:
        if self._chunks is None and self._open is not None:
            self._context = self._open()
            response = await self._context.__aenter__()
            logger.debug("Listen stream opened")
            self._chunks = response.aiter_bytes()
        if self._chunks is None:
            return None
        try:
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            return None
        except httpx.TransportError as e:
            await self._close_response()
            raise TransportError(f"Listen stream failed: {e}") from e

    async def _close_response(self) -> None:
        if self._context is not None:
            context = self._context
            self._context = None
            await context.__aexit__(None, None, None)
            logger.debug("Listen stream closed")

    async def aclose(self) -> None:
        self._closed = True
        self._buffer.clear()
        self._pending.clear()
        await self._close_response()

    async def __aenter__(self) -> ListenStream:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
