"""
Chat client: live room streams and sending messages.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from gamplo.chat.connection import (
    ChatConnection,
    ConnectionState,
    FailureCallback,
    MessageCallback,
)
from gamplo.chat.reconnect import BackoffRetrier
from gamplo.exceptions import GamploError, NotAuthenticatedError, ValidationError
from gamplo.models import GamploConfig, SendMessageResponse
from gamplo.session import MemorySessionManager

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500

STREAM_PATH = "/api/sdk/chat/stream"
SEND_PATH = "/api/sdk/chat/send"


def validate_room_id(room_id: Any) -> int:
    """Check that `room_id` is a positive integer."""
    if isinstance(room_id, bool) or not isinstance(room_id, int) or room_id <= 0:
        raise ValidationError("Room ID must be a positive integer")
    return room_id


class ChatClient:
    """
    Keeps at most one live connection per room.

    connect(), disconnect() and disconnect_all() return immediately; the
    streaming runs in background tasks on the current event loop. Each
    instance owns its own room table, so independent clients never interfere.

    Usage:
        client = ChatClient(http, session)

        def on_message(message: ChatMessage):
            print(f"{message.display_name}: {message.message}")

        stop = client.connect(42, on_message)
        ...
        stop()
    """

    def __init__(
        self,
        http,
        session: MemorySessionManager,
        config: Optional[GamploConfig] = None,
        on_failure: Optional[FailureCallback] = None,
    ):
        """
        Initialize chat client.

        Args:
            http: Transport providing base_url, open_stream() and post()
            session: Session store; a session id is required to connect or send
            config: Retry and decoding settings
            on_failure: Called with (room_id, error) when a room's retries are
                exhausted. Without it such a room is dropped silently (logged only).
        """
        self._http = http
        self._session = session
        self._config = config or GamploConfig()
        self._on_failure = on_failure

        self._connections: Dict[int, ChatConnection] = {}

    def _require_session(self) -> str:
        session_id = self._session.get_session_id()
        if not session_id:
            raise NotAuthenticatedError()
        return session_id

    def _stream_url(self, room_id: int, session_id: str) -> str:
        query = urlencode({"roomId": room_id, "session": session_id})
        return f"{self._http.base_url}{STREAM_PATH}?{query}"

    def connect(self, room_id: int, callback: MessageCallback) -> Callable[[], None]:
        """
        Start streaming a room's chat messages to `callback`.

        A previous connection for the same room is disconnected first.
        Must be called from a running event loop.

        Args:
            room_id: Positive integer room ID
            callback: Called with each ChatMessage, in stream order. May be a
                plain function or a coroutine function.

        Returns:
            A function that disconnects this room

        Raises:
            NotAuthenticatedError: If there is no session
            ValidationError: If room_id or callback is invalid
        """
        session_id = self._require_session()
        validate_room_id(room_id)
        if not callable(callback):
            raise ValidationError("onMessage callback must be a function")

        # Fail before touching the existing connection when there is no loop
        asyncio.get_running_loop()

        if room_id in self._connections:
            logger.info(f"Replacing existing chat connection for room {room_id}")
            self.disconnect(room_id)

        connection = ChatConnection(
            room_id=room_id,
            url=self._stream_url(room_id, session_id),
            callback=callback,
            open_stream=self._http.open_stream,
            retrier=BackoffRetrier(
                max_attempts=self._config.chat_max_retries,
                base_delay_ms=self._config.chat_base_delay_ms,
                jitter_ms=self._config.chat_jitter_ms,
            ),
            encoding=self._config.stream_encoding,
            on_finished=self._on_connection_finished,
            on_failure=self._on_failure,
        )
        connection.start()
        self._connections[room_id] = connection

        logger.info(f"Connecting to chat room {room_id}")
        return lambda: self.disconnect(room_id)

    def disconnect(self, room_id: int) -> None:
        """Disconnect a room. Does nothing if it is not connected."""
        connection = self._connections.pop(room_id, None)
        if connection is not None:
            connection.cancel()
            logger.info(f"Disconnected from chat room {room_id}")

    def disconnect_all(self) -> None:
        """Disconnect every room."""
        for room_id in list(self._connections):
            self.disconnect(room_id)

    async def aclose(self) -> None:
        """Disconnect every room and wait for the connection tasks to finish."""
        tasks = [c.task for c in self._connections.values() if c.task is not None]
        self.disconnect_all()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _on_connection_finished(self, connection: ChatConnection) -> None:
        if connection.state is not ConnectionState.FAILED:
            return

        # Only drop the room if it has not been reconnected since
        if self._connections.get(connection.room_id) is connection:
            del self._connections[connection.room_id]
            logger.info(f"Removed failed chat connection for room {connection.room_id}")

    async def send_message(self, room_id: int, message: str) -> SendMessageResponse:
        """
        Send a message to a chat room.

        Raises:
            NotAuthenticatedError: If there is no session
            ValidationError: If the room ID or message is invalid
            GamploError: If the request fails
        """
        session_id = self._require_session()
        validate_room_id(room_id)

        if not message or not isinstance(message, str):
            raise ValidationError("Message is required and must be a string")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message too long. Maximum {MAX_MESSAGE_LENGTH} characters allowed."
            )
        if not message.strip():
            raise ValidationError("Message cannot be empty")

        try:
            response = await self._http.post(
                SEND_PATH,
                {"roomId": room_id, "message": message},
                {"x-sdk-session": session_id},
            )
            return SendMessageResponse.model_validate(response)
        except GamploError:
            raise
        except Exception as e:
            raise GamploError(f"Failed to send message: {e}")

    def get_connection(self, room_id: int) -> Optional[ChatConnection]:
        return self._connections.get(room_id)

    def is_connected(self, room_id: int) -> bool:
        """Check if a room has a registered connection."""
        return room_id in self._connections

    @property
    def rooms(self) -> list[int]:
        """Get the room IDs with a registered connection."""
        return list(self._connections)

    def __len__(self) -> int:
        return len(self._connections)
