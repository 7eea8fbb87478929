"""
Achievement listing and unlocking.
"""

import logging

from gamplo.exceptions import GamploError, NotAuthenticatedError, ValidationError
from gamplo.models import Achievement, UnlockAchievementResponse
from gamplo.session import MemorySessionManager

logger = logging.getLogger(__name__)


class AchievementService:
    def __init__(self, http, session: MemorySessionManager):
        self._http = http
        self._session = session

    def _require_session(self) -> str:
        session_id = self._session.get_session_id()
        if not session_id:
            raise NotAuthenticatedError()
        return session_id

    async def get_achievements(self) -> list[Achievement]:
        """
        Get all achievements for the game, with the player's unlock status.

        Raises:
            NotAuthenticatedError: If there is no session
            GamploError: If the request fails
        """
        session_id = self._require_session()

        try:
            response = await self._http.get(
                "/api/sdk/achievements", {"x-sdk-session": session_id}
            )
            return [
                Achievement.model_validate(item)
                for item in (response or {}).get("achievements", [])
            ]
        except GamploError:
            raise
        except Exception as e:
            raise GamploError(f"Failed to get achievements: {e}")

    async def unlock_achievement(self, key: str) -> UnlockAchievementResponse:
        """
        Unlock an achievement for the player.

        Raises:
            NotAuthenticatedError: If there is no session
            ValidationError: If the key is missing
            GamploError: If the request fails
        """
        session_id = self._require_session()

        if not key or not isinstance(key, str):
            raise ValidationError("Achievement key is required and must be a string")

        try:
            response = await self._http.post(
                "/api/sdk/achievements/unlock",
                {"key": key},
                {"x-sdk-session": session_id},
            )
            result = UnlockAchievementResponse.model_validate(response)
        except GamploError:
            raise
        except Exception as e:
            raise GamploError(f"Failed to unlock achievement: {e}")

        if result.already_unlocked:
            logger.debug(f"Achievement {key} was already unlocked")
        return result
