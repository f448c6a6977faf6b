"""Streaming multipart/form-data reader.

Parts are decoded as the request body arrives. ``next_part()`` returns a
``BodyPart`` as soon as its headers are parsed, and ``BodyPart.read()``
pulls only as much of the body as it needs for the next chunk, so a part is
never buffered beyond the network chunk being parsed.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import AsyncIterator, Deque, Dict, Optional, Tuple

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header

from .errors import BadRequestError

logger = logging.getLogger("hashdrop.formstream")

MULTIPART_CONTENT_TYPE = b"multipart/form-data"

# parser events, in the order the parser emits them for each part
_HEADERS = "headers"
_DATA = "data"
_END = "end"


def _decode(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


class BodyPart:
    """One part of a multipart body, readable once, front to back."""

    def __init__(self, reader: "MultipartReader", headers: Dict[bytes, bytes]) -> None:
        self._reader = reader
        self._buffer = b""
        self._done = False
        self.headers = headers
        self.content_type = _decode(headers.get(b"content-type", b""))

        _, options = parse_options_header(headers.get(b"content-disposition", b""))
        self.name = _decode(options.get(b"name", b""))
        # None for plain form fields, "" for an empty file input
        filename = options.get(b"filename")
        self.filename: Optional[str] = _decode(filename) if filename is not None else None

    async def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` bytes (all remaining if negative), b"" at the end."""
        if size < 0:
            chunks = [self._buffer]
            self._buffer = b""
            while True:
                chunk = await self._next_chunk()
                if chunk is None:
                    return b"".join(chunks)
                chunks.append(chunk)

        while not self._buffer:
            chunk = await self._next_chunk()
            if chunk is None:
                return b""
            self._buffer = chunk
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    async def drain(self) -> None:
        """Skip whatever is left of this part."""
        self._buffer = b""
        while await self._next_chunk() is not None:
            pass

    async def _next_chunk(self) -> Optional[bytes]:
        if self._done:
            return None
        chunk = await self._reader._part_data()
        if chunk is None:
            self._done = True
        return chunk


class MultipartReader:
    """Pull-style reader over python-multipart's push parser."""

    def __init__(self, boundary: bytes, stream: AsyncIterator[bytes]) -> None:
        self._stream = stream.__aiter__()
        self._events: Deque[Tuple[str, object]] = deque()
        self._current: Optional[BodyPart] = None
        self._exhausted = False
        self._finished = False
        self._in_part = False
        self._parts_seen = 0

        self._headers: Dict[bytes, bytes] = {}
        self._header_field = bytearray()
        self._header_value = bytearray()

        callbacks = {
            "on_part_begin": self._on_part_begin,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
            "on_end": self._on_end,
        }
        self._parser = MultipartParser(boundary, callbacks)

    @classmethod
    def from_content_type(cls, content_type: str, stream: AsyncIterator[bytes]) -> "MultipartReader":
        ctype, params = parse_options_header(content_type)
        if ctype.strip().lower() != MULTIPART_CONTENT_TYPE:
            raise BadRequestError(f"Expected multipart/form-data, got {content_type or 'no content type'!r}")
        boundary = params.get(b"boundary")
        if not boundary:
            raise BadRequestError("Missing boundary in multipart content type")
        return cls(boundary, stream)

    async def next_part(self) -> Optional[BodyPart]:
        """The next part in stream order, or None after the closing boundary."""
        if self._current is not None:
            await self._current.drain()
            self._current = None

        event = await self._next_event()
        if event is None:
            return None
        kind, payload = event
        if kind != _HEADERS:
            raise BadRequestError(f"Unexpected multipart event {kind!r} between parts")
        self._current = BodyPart(self, payload)
        logger.debug("multipart part name=%r filename=%r", self._current.name, self._current.filename)
        return self._current

    async def _part_data(self) -> Optional[bytes]:
        event = await self._next_event()
        if event is None or event[0] == _END:
            return None
        return event[1]

    async def _next_event(self) -> Optional[Tuple[str, object]]:
        while not self._events:
            if not await self._pull():
                return None
        return self._events.popleft()

    async def _pull(self) -> bool:
        """Feed the next body chunk to the parser; False once the body is used up."""
        if self._exhausted:
            return False
        try:
            chunk = await self._stream.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            try:
                self._parser.finalize()
            except FormParserError as e:
                raise BadRequestError(f"Malformed multipart body: {e}") from e
            if self._in_part or not (self._finished or self._parts_seen):
                raise BadRequestError("Multipart body ended before the closing boundary")
            return False

        if chunk:
            try:
                self._parser.write(chunk)
            except FormParserError as e:
                raise BadRequestError(f"Malformed multipart body: {e}") from e
        return True

    # --- parser callbacks ---

    def _on_part_begin(self) -> None:
        self._headers = {}
        self._in_part = True
        self._parts_seen += 1

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        self._events.append((_HEADERS, self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if end > start:
            self._events.append((_DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._in_part = False
        self._events.append((_END, None))

    def _on_end(self) -> None:
        self._finished = True
