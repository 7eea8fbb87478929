"""Shared fakes for chat streaming tests."""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

from gamplo.exceptions import TransportError


def message_payload(msg_id: str = "m1", text: str = "hi", timestamp: int = 1000) -> dict[str, Any]:
    return {
        "id": msg_id,
        "userId": "u1",
        "username": "a",
        "displayName": "A",
        "image": "",
        "message": text,
        "timestamp": timestamp,
    }


def message_line(msg_id: str = "m1", text: str = "hi", timestamp: int = 1000) -> bytes:
    event = {"type": "message", "data": message_payload(msg_id, text, timestamp)}
    return f"data: {json.dumps(event, ensure_ascii=False)}\n".encode("utf-8")


async def as_chunks(parts):
    for part in parts:
        yield part


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll `predicate` until true or fail after `timeout` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


class FakeStream:
    """
    A scripted stream response. Chunks are queued; the stream ends at the
    None sentinel, or stays open until cancelled when `hold_open` is set.
    """

    def __init__(self, chunks=(), status: int = 200, hold_open: bool = False):
        self.status = status
        self.reason = "OK" if 200 <= status < 300 else "Service Unavailable"
        self.released = False
        self.queue: asyncio.Queue = asyncio.Queue()
        for chunk in chunks:
            self.queue.put_nowait(chunk)
        if not hold_open:
            self.queue.put_nowait(None)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def push(self, chunk: bytes) -> None:
        self.queue.put_nowait(chunk)

    def end(self) -> None:
        self.queue.put_nowait(None)

    async def iter_chunks(self):
        while True:
            chunk = await self.queue.get()
            if chunk is None:
                return
            yield chunk

    def release(self) -> None:
        self.released = True


class FakeTransport:
    """
    Records open_stream() calls and plays back scripted outcomes: a
    FakeStream is returned, an exception is raised. Once the script runs out
    every call fails with TransportError.
    """

    base_url = "https://gamplo.test"

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.calls: list[str] = []
        self.tokens = []
        self.post = AsyncMock(return_value={"success": True})

    async def open_stream(self, url: str, token=None):
        self.calls.append(url)
        self.tokens.append(token)
        if token is not None:
            token.raise_if_cancelled()
        await asyncio.sleep(0)

        if not self.outcomes:
            raise TransportError("connection refused")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


