"""
Request/response calls to the Gamplo SDK API.
"""

from gamplo.api.achievements import AchievementService
from gamplo.api.auth import AuthService
from gamplo.api.player import PlayerService

__all__ = ["AchievementService", "AuthService", "PlayerService"]
