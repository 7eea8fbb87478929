"""
A single room's live chat stream.
"""

import asyncio
import inspect
import logging
from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Protocol

from gamplo.chat.cancellation import CancellationToken
from gamplo.chat.decoder import iter_events
from gamplo.chat.reconnect import BackoffRetrier
from gamplo.exceptions import TransportError
from gamplo.models import ChatMessage

logger = logging.getLogger(__name__)

MessageCallback = Callable[[ChatMessage], Any]
FailureCallback = Callable[[int, BaseException], Any]


class StreamBody(Protocol):
    """What a transport returns for an opened stream."""

    ok: bool
    status: int
    reason: Optional[str]

    def iter_chunks(self) -> AsyncIterator[bytes]: ...

    def release(self) -> None: ...


OpenStream = Callable[[str, CancellationToken], Awaitable[StreamBody]]


class ConnectionState(str, Enum):
    """Connection lifecycle states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSED = "closed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {ConnectionState.CLOSED, ConnectionState.FAILED, ConnectionState.CANCELLED}
)


class ChatConnection:
    """
    Owns one subscription to one room.

    Opens the stream through the retrier, decodes it and hands every chat
    message to the callback in stream order. A clean end of stream is not
    retried. Errors never escape the background task; they are logged and,
    if an `on_failure` hook is given, reported to it once retries run out.
    """

    def __init__(
        self,
        room_id: int,
        url: str,
        callback: MessageCallback,
        open_stream: OpenStream,
        retrier: Optional[BackoffRetrier] = None,
        encoding: str = "utf-8",
        on_finished: Optional[Callable[["ChatConnection"], None]] = None,
        on_failure: Optional[FailureCallback] = None,
    ):
        self.room_id = room_id
        self._url = url
        self._callback = callback
        self._open_stream = open_stream
        self._retrier = retrier or BackoffRetrier()
        self._encoding = encoding
        self._on_finished = on_finished
        self._on_failure = on_failure

        # Created before any I/O so an immediate disconnect is always seen
        self.token = CancellationToken()

        self._state = ConnectionState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._messages_received = 0
        self._last_error: Optional[BaseException] = None

    def start(self) -> asyncio.Task:
        """Run the connection as a background task on the running loop."""
        if self._task is not None:
            return self._task

        loop = asyncio.get_running_loop()
        self._state = ConnectionState.CONNECTING
        self._task = loop.create_task(self.run(), name=f"gamplo-chat-room-{self.room_id}")
        self._task.add_done_callback(self._on_task_done)
        self.token.bind(self._task)
        return self._task

    def _on_task_done(self, task: asyncio.Task) -> None:
        # Cancelled before run() got to execute
        if task.cancelled() and self._state not in TERMINAL_STATES:
            self._state = ConnectionState.CANCELLED

    def cancel(self) -> None:
        """Request a stop; the task ends as CANCELLED."""
        self.token.cancel()

    async def run(self) -> None:
        """Connect with retries and stream until closed, cancelled or failed."""
        self._state = ConnectionState.CONNECTING
        try:
            await self._retrier.execute(self._attempt, self.token)

        except asyncio.CancelledError:
            if not self.token.cancelled:
                raise
            self._state = ConnectionState.CANCELLED

        except Exception as e:
            self._last_error = e
            if self.token.cancelled:
                self._state = ConnectionState.CANCELLED
            else:
                self._state = ConnectionState.FAILED
                logger.warning(f"Chat connection failed permanently for room {self.room_id}: {e}")
                await self._report_failure(e)

        else:
            if self.token.cancelled:
                self._state = ConnectionState.CANCELLED
            else:
                self._state = ConnectionState.CLOSED
                logger.info(f"Chat stream closed by server for room {self.room_id}")

        finally:
            if self._state is ConnectionState.CANCELLED:
                logger.debug(f"Chat connection cancelled for room {self.room_id}")
            if self._on_finished is not None:
                self._on_finished(self)

    async def _attempt(self) -> None:
        """One connection attempt: open the stream and read it to the end."""
        self.token.raise_if_cancelled()
        self._state = ConnectionState.CONNECTING

        response = await self._open_stream(self._url, self.token)
        try:
            if not response.ok:
                raise TransportError(
                    f"HTTP {response.status}: {response.reason}",
                    status=response.status,
                )

            self._state = ConnectionState.STREAMING
            logger.info(f"Connected to chat stream for room {self.room_id}")

            events = iter_events(response.iter_chunks(), self._encoding, self.token)
            async with aclosing(events):
                async for event in events:
                    if self.token.cancelled:
                        break
                    if event.type == "message" and event.data is not None:
                        await self._dispatch(event.data)
                    else:
                        logger.debug(f"Received {event.type} event for room {self.room_id}")

        finally:
            response.release()

    async def _dispatch(self, message: ChatMessage) -> None:
        """Invoke the callback; its errors are logged and do not stop the stream."""
        self._messages_received += 1
        try:
            result = self._callback(message)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in chat callback for room {self.room_id}: {e}", exc_info=True)

    async def _report_failure(self, error: BaseException) -> None:
        if self._on_failure is None:
            return

        try:
            result = self._on_failure(self.room_id, error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in failure callback for room {self.room_id}: {e}", exc_info=True)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def done(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def messages_received(self) -> int:
        """Get the number of chat messages delivered to the callback."""
        return self._messages_received

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error
