"""
Current player lookup.
"""

from typing import Optional

from gamplo.exceptions import GamploError, NotAuthenticatedError
from gamplo.models import Player
from gamplo.session import MemorySessionManager


class PlayerService:
    def __init__(self, http, session: MemorySessionManager):
        self._http = http
        self._session = session

    async def get_player(self) -> Optional[Player]:
        """Get the authenticated player, or None if the API returns none."""
        session_id = self._session.get_session_id()
        if not session_id:
            raise NotAuthenticatedError()

        try:
            response = await self._http.get(
                "/api/sdk/player", {"x-sdk-session": session_id}
            )
            player = (response or {}).get("player")
            if not player:
                return None
            return Player.model_validate(player)
        except GamploError:
            raise
        except Exception as e:
            raise GamploError(f"Failed to get player: {e}")
