"""
Token exchange.
"""

import logging

from gamplo.exceptions import AuthenticationError, GamploError
from gamplo.models import AuthResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, http):
        self._http = http

    async def authenticate(self, token: str) -> AuthResponse:
        """
        Exchange a Gamplo token for a session.

        Args:
            token: The Gamplo token handed to the game

        Returns:
            The session id and the authenticated player

        Raises:
            AuthenticationError: If the token is missing or the exchange fails
        """
        if not token or not isinstance(token, str):
            raise AuthenticationError("Token is required and must be a string")

        try:
            response = await self._http.post("/api/sdk/auth", {"token": token})
            auth = AuthResponse.model_validate(response)
        except GamploError as e:
            raise AuthenticationError(
                f"Authentication failed: {e.message}", status=e.status, code=e.code
            )
        except Exception as e:
            raise AuthenticationError(f"Authentication failed: {e}")

        logger.info(f"Authenticated as {auth.player.username}")
        return auth
