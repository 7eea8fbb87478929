"""
Decoder for the line-oriented chat event stream.

The stream is newline-delimited text. Lines starting with ``data: `` carry one
JSON-encoded chat event; every other line is ignored.
"""

import codecs
import json
import logging
from typing import AsyncIterable, AsyncIterator, Optional

from pydantic import ValidationError as PydanticValidationError

from gamplo.chat.cancellation import CancellationToken
from gamplo.exceptions import ParseError
from gamplo.models import ChatEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
EVENT_TYPES = ("connected", "message")


class StreamDecoder:
    """
    Turns arbitrarily split byte chunks into complete text lines.

    Chunks carry no alignment to line or character boundaries, so decoding
    is incremental and the trailing partial line is kept for the next chunk.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return the non-blank lines it completed."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in lines if line.strip()]

    def flush(self) -> list[str]:
        """Finish decoding at end of stream and return any unterminated line."""
        self._buffer += self._decoder.decode(b"", final=True)
        line, self._buffer = self._buffer.rstrip("\r"), ""
        return [line] if line.strip() else []

    @property
    def pending(self) -> str:
        """Get the buffered partial line."""
        return self._buffer


def parse_event_line(line: str) -> Optional[ChatEvent]:
    """
    Parse one stream line.

    Args:
        line: A complete line without its line break

    Returns:
        The decoded event, or None if the line is not an event line or
        carries an event type this client does not handle

    Raises:
        ParseError: If the payload is not JSON or not a chat event
    """
    if not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX):]
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse chat event: {e}") from e

    event_type = raw.get("type") if isinstance(raw, dict) else None
    if isinstance(event_type, str) and event_type not in EVENT_TYPES:
        logger.debug(f"Ignoring chat event of type {event_type!r}")
        return None

    try:
        return ChatEvent.model_validate(raw)
    except PydanticValidationError as e:
        raise ParseError(f"Failed to parse chat event: {e}") from e


async def iter_events(
    chunks: AsyncIterable[bytes],
    encoding: str = "utf-8",
    token: Optional[CancellationToken] = None,
) -> AsyncIterator[ChatEvent]:
    """
    Decode chat events from a byte chunk source.

    Malformed event lines are logged and skipped; the stream continues.
    Iteration ends with the chunk source or once `token` is cancelled.

    Yields:
        Chat events in stream order
    """
    decoder = StreamDecoder(encoding)
    iterator = aiter(chunks)

    while True:
        if token is not None and token.cancelled:
            return

        try:
            chunk = await anext(iterator)
        except StopAsyncIteration:
            break

        for line in decoder.feed(chunk):
            event = _parse_or_skip(line)
            if event is not None:
                yield event

    for line in decoder.flush():
        event = _parse_or_skip(line)
        if event is not None:
            yield event


def _parse_or_skip(line: str) -> Optional[ChatEvent]:
    try:
        return parse_event_line(line)
    except ParseError as e:
        logger.warning(f"{e} (line={line[:200]!r})")
        return None
