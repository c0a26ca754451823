"""
Reassembly of the assistant SSE stream.

Turns a chunked byte stream into the ordered sequence of typed events it carries.
Chunk edges may fall anywhere (mid-character, mid-line, mid-block); the reassembler
buffers decoded text and only parses blocks once their blank-line separator arrives.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterable, Callable, Iterable

from pydantic import ValidationError

from brain_stream._cancel import CancelToken
from brain_stream._errors import BrainStreamError
from brain_stream._sse import BLOCK_SEPARATOR, extract_data, normalize_newlines, split_blocks
from brain_stream.events import HubEvent, parse_event

logger = logging.getLogger(__name__)

EventCallback = Callable[[HubEvent], Any]

_LOG_PAYLOAD_PREVIEW = 200


class StreamReassembler:
    """
    Stateful parser for one stream.

    Owns the incremental decoder, the text buffer and the final-received flag.
    Events are handed to `on_event` synchronously, in arrival order; exceptions
    raised by the callback propagate to the caller of feed()/finish().
    """

    def __init__(
        self,
        on_event: EventCallback,
        *,
        cancel_token: CancelToken | None = None,
        max_buffer_chars: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        if max_buffer_chars is not None and max_buffer_chars <= 0:
            raise ValueError("max_buffer_chars must be a positive integer or None")
        self._on_event = on_event
        self._cancel_token = cancel_token
        self._max_buffer_chars = max_buffer_chars
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._final_received = False
        self._finished = False

    @property
    def final_received(self) -> bool:
        return self._final_received

    @property
    def buffered_chars(self) -> int:
        return len(self._buffer)

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, chunk: bytes) -> None:
        """Decode one chunk and dispatch every block it completes."""
        if self._finished:
            raise BrainStreamError("Cannot feed a stream that has already finished")

        self._append(self._decoder.decode(chunk))
        blocks, self._buffer = split_blocks(self._buffer)
        for block in blocks:
            self._process_block(block)
        self._check_buffer_limit()

    def finish(self) -> None:
        """
        Flush the decoder and process whatever is left in the buffer.

        The last event of a stream usually has no trailing separator, so the
        residue is treated as a final set of blocks.
        """
        if self._finished:
            return
        self._finished = True

        self._append(self._decoder.decode(b"", final=True))
        remaining, self._buffer = self._buffer, ""
        for block in remaining.split(BLOCK_SEPARATOR):
            self._process_block(block)

    def _append(self, text: str) -> None:
        if not text:
            return
        # A trailing "\r" may be the first half of a CRLF pair split across chunks.
        if self._buffer.endswith("\r"):
            self._buffer = self._buffer[:-1]
            text = "\r" + text
        self._buffer += normalize_newlines(text)

    def _check_buffer_limit(self) -> None:
        if self._max_buffer_chars is None:
            return
        if len(self._buffer) > self._max_buffer_chars:
            raise BrainStreamError(
                f"Unterminated SSE block exceeds {self._max_buffer_chars} buffered characters"
            )

    def _cancelled(self) -> bool:
        return self._cancel_token is not None and self._cancel_token.cancelled

    def _process_block(self, block: str) -> None:
        if not block.strip():
            return
        if self._final_received:
            logger.debug("Ignoring SSE block received after final event")
            return

        payload = extract_data(block)
        if payload is None:
            return

        try:
            event = parse_event(payload)
        except ValidationError as e:
            logger.warning(
                "Failed to parse SSE event: %r (%d errors)",
                payload[:_LOG_PAYLOAD_PREVIEW],
                e.error_count(),
            )
            if _declared_type(payload) == "final":
                logger.warning("Malformed final event; ignoring the rest of the stream")
                self._final_received = True
            return

        if self._cancelled():
            return

        if event.type == "final":
            self._final_received = True
        self._on_event(event)


def _declared_type(payload: str) -> Any:
    try:
        data = json.loads(payload)
    except ValueError:
        return None
    return data.get("type") if isinstance(data, dict) else None


def _check_stream(stream: Any) -> None:
    if stream is None:
        raise BrainStreamError("No response body")


def consume(
    stream: Iterable[bytes],
    on_event: EventCallback,
    cancel_token: CancelToken | None = None,
    *,
    max_buffer_chars: int | None = None,
) -> None:
    """
    Read a byte stream to the end and dispatch its events to `on_event`.

    Malformed blocks are skipped. The call returns normally when the stream
    ends or when `cancel_token` is cancelled; either way the reader is closed
    before returning.

    Raises:
        BrainStreamError: If there is no stream or the buffer limit is exceeded.
    """
    _check_stream(stream)
    reassembler = StreamReassembler(
        on_event,
        cancel_token=cancel_token,
        max_buffer_chars=max_buffer_chars,
    )
    reader = iter(stream)
    try:
        while True:
            if cancel_token is not None and cancel_token.cancelled:
                return
            try:
                chunk = next(reader)
            except StopIteration:
                break
            if cancel_token is not None and cancel_token.cancelled:
                return
            reassembler.feed(chunk)
        reassembler.finish()
    finally:
        close = getattr(reader, "close", None)
        if callable(close):
            close()


async def aconsume(
    stream: AsyncIterable[bytes],
    on_event: EventCallback,
    cancel_token: CancelToken | None = None,
    *,
    max_buffer_chars: int | None = None,
) -> None:
    """
    Versión async de consume().

    Task cancellation (asyncio.CancelledError) propagates as usual; the reader
    is closed on that path too.
    """
    _check_stream(stream)
    reassembler = StreamReassembler(
        on_event,
        cancel_token=cancel_token,
        max_buffer_chars=max_buffer_chars,
    )
    reader = aiter(stream)
    try:
        while True:
            if cancel_token is not None and cancel_token.cancelled:
                return
            try:
                chunk = await anext(reader)
            except StopAsyncIteration:
                break
            if cancel_token is not None and cancel_token.cancelled:
                return
            reassembler.feed(chunk)
        reassembler.finish()
    finally:
        aclose = getattr(reader, "aclose", None)
        if callable(aclose):
            await aclose()
