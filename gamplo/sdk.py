"""
Main Gamplo SDK client.
"""

import logging
from typing import Callable, Optional

from gamplo.api import AchievementService, AuthService, PlayerService
from gamplo.chat import ChatClient
from gamplo.chat.connection import FailureCallback, MessageCallback
from gamplo.config import get_gamplo_token
from gamplo.http import HttpClient
from gamplo.models import (
    Achievement,
    AuthResponse,
    GamploConfig,
    Player,
    SendMessageResponse,
    UnlockAchievementResponse,
)
from gamplo.session import MemorySessionManager

logger = logging.getLogger(__name__)


class GamploSDK:
    """
    Gamplo client: authentication, player and achievement calls, and chat.

    Usage:
        async with GamploSDK(token="...") as sdk:
            player = await sdk.get_player()
            stop = sdk.connect_to_chat(42, lambda m: print(m.message))
    """

    def __init__(
        self,
        config: Optional[GamploConfig] = None,
        token: Optional[str] = None,
        session_id: Optional[str] = None,
        http: Optional[HttpClient] = None,
        on_chat_failure: Optional[FailureCallback] = None,
    ):
        """
        Initialize the SDK. Call initialize() (or use ``async with``) to
        apply `session_id` or authenticate with `token`.

        Args:
            config: Client configuration
            token: Gamplo token to exchange for a session
            session_id: Existing session id; takes precedence over `token`
            http: Transport to use instead of a new HttpClient
            on_chat_failure: Called with (room_id, error) when a chat room
                gives up reconnecting
        """
        self._config = config or GamploConfig()
        self._token = token
        self._initial_session_id = session_id

        self._session = MemorySessionManager()
        self._http = http or HttpClient(self._config)

        self._auth = AuthService(self._http)
        self._players = PlayerService(self._http, self._session)
        self._achievements = AchievementService(self._http, self._session)
        self._chat = ChatClient(
            self._http, self._session, self._config, on_failure=on_chat_failure
        )

    async def initialize(self) -> None:
        """
        Establish a session from the constructor arguments, or from a token
        found on the command line or in GAMPLO_TOKEN.

        Failures are logged, not raised; the SDK stays unauthenticated.
        """
        try:
            if self._initial_session_id:
                self._session.set_session_id(self._initial_session_id)
            elif self._token:
                await self.authenticate(self._token)
            else:
                token = get_gamplo_token()
                if token:
                    await self.authenticate(token)
                else:
                    logger.debug("No Gamplo token found, skipping authentication")
        except Exception as e:
            logger.warning(f"Failed to auto-initialize authentication: {e}")

    async def __aenter__(self) -> "GamploSDK":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def get_session_id(self) -> Optional[str]:
        return self._session.get_session_id()

    async def authenticate(self, token: str) -> AuthResponse:
        """Exchange a token for a session and keep the session id."""
        response = await self._auth.authenticate(token)
        self._session.set_session_id(response.session_id)
        return response

    async def get_player(self) -> Optional[Player]:
        return await self._players.get_player()

    async def get_achievements(self) -> list[Achievement]:
        return await self._achievements.get_achievements()

    async def unlock_achievement(self, key: str) -> UnlockAchievementResponse:
        return await self._achievements.unlock_achievement(key)

    async def send_message(self, room_id: int, message: str) -> SendMessageResponse:
        return await self._chat.send_message(room_id, message)

    def connect_to_chat(self, room_id: int, on_message: MessageCallback) -> Callable[[], None]:
        return self._chat.connect(room_id, on_message)

    def disconnect_from_chat(self, room_id: int) -> None:
        self._chat.disconnect(room_id)

    def disconnect_all_chat(self) -> None:
        self._chat.disconnect_all()

    def destroy(self) -> None:
        """Disconnect all chat rooms and forget the session."""
        self.disconnect_all_chat()
        self._session.clear_session()

    async def aclose(self) -> None:
        """destroy(), wait for the chat tasks to stop, then close the HTTP session."""
        await self._chat.aclose()
        self._session.clear_session()
        await self._http.close()

    def get_config(self) -> GamploConfig:
        return self._config.model_copy()

    @property
    def chat(self) -> ChatClient:
        return self._chat
