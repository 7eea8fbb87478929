"""Tests for the request/response API services."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from gamplo.api import AchievementService, AuthService, PlayerService
from gamplo.exceptions import (
    AuthenticationError,
    GamploError,
    NotAuthenticatedError,
    TransportError,
    ValidationError,
)
from gamplo.session import MemorySessionManager

PLAYER = {"id": "p1", "username": "ace", "displayName": "Ace", "image": "ace.png"}


def make_http(get=None, post=None):
    http = MagicMock()
    http.get = AsyncMock(return_value=get)
    http.post = AsyncMock(return_value=post)
    return http


class TestAuthService:

    @pytest.mark.asyncio
    async def test_authenticate(self):
        http = make_http(post={"sessionId": "sess-9", "player": PLAYER})

        auth = await AuthService(http).authenticate("tok")

        assert auth.session_id == "sess-9"
        assert auth.player.username == "ace"
        http.post.assert_awaited_once_with("/api/sdk/auth", {"token": "tok"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", None, 123])
    async def test_invalid_token(self, token):
        http = make_http()

        with pytest.raises(AuthenticationError, match="Token is required"):
            await AuthService(http).authenticate(token)

        http.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self):
        http = make_http()
        http.post.side_effect = TransportError("HTTP 401: bad token", status=401)

        with pytest.raises(AuthenticationError) as exc_info:
            await AuthService(http).authenticate("tok")

        assert str(exc_info.value) == "Authentication failed: HTTP 401: bad token"
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        http = make_http(post={"unexpected": True})

        with pytest.raises(AuthenticationError):
            await AuthService(http).authenticate("tok")


class TestPlayerService:

    @pytest.mark.asyncio
    async def test_get_player(self):
        http = make_http(get={"player": PLAYER})
        service = PlayerService(http, MemorySessionManager("sess-1"))

        player = await service.get_player()

        assert player.display_name == "Ace"
        http.get.assert_awaited_once_with("/api/sdk/player", {"x-sdk-session": "sess-1"})

    @pytest.mark.asyncio
    async def test_missing_player_is_none(self):
        http = make_http(get={"player": None})

        assert await PlayerService(http, MemorySessionManager("s")).get_player() is None

    @pytest.mark.asyncio
    async def test_requires_session(self):
        http = make_http()

        with pytest.raises(NotAuthenticatedError):
            await PlayerService(http, MemorySessionManager()).get_player()

        http.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_error_wrapped(self):
        http = make_http()
        http.get.side_effect = RuntimeError("boom")

        with pytest.raises(GamploError, match="Failed to get player: boom"):
            await PlayerService(http, MemorySessionManager("s")).get_player()

    @pytest.mark.asyncio
    async def test_malformed_player_is_wrapped(self):
        http = make_http(get={"player": {"id": "p1"}})

        with pytest.raises(GamploError, match="Failed to get player"):
            await PlayerService(http, MemorySessionManager("s")).get_player()


class TestAchievementService:

    @pytest.mark.asyncio
    async def test_get_achievements(self):
        http = make_http(get={"achievements": [
            {"id": 1, "key": "first", "title": "First", "description": "", "icon": "",
             "points": 5, "hidden": False, "unlocked": True},
            {"id": 2, "key": "second", "title": "Second", "description": "", "icon": "",
             "points": 10, "hidden": True},
        ]})
        service = AchievementService(http, MemorySessionManager("sess-1"))

        achievements = await service.get_achievements()

        assert [a.key for a in achievements] == ["first", "second"]
        assert achievements[0].unlocked is True
        assert achievements[1].unlocked is None
        http.get.assert_awaited_once_with("/api/sdk/achievements", {"x-sdk-session": "sess-1"})

    @pytest.mark.asyncio
    async def test_unlock(self):
        http = make_http(post={
            "success": True,
            "alreadyUnlocked": False,
            "achievement": {"key": "first", "title": "First", "description": "", "icon": "", "points": 5},
        })
        service = AchievementService(http, MemorySessionManager("sess-1"))

        result = await service.unlock_achievement("first")

        assert result.success
        assert not result.already_unlocked
        http.post.assert_awaited_once_with(
            "/api/sdk/achievements/unlock", {"key": "first"}, {"x-sdk-session": "sess-1"}
        )

    @pytest.mark.asyncio
    async def test_unlock_requires_key(self):
        http = make_http()
        service = AchievementService(http, MemorySessionManager("sess-1"))

        with pytest.raises(ValidationError):
            await service.unlock_achievement("")

        http.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_session(self):
        service = AchievementService(make_http(), MemorySessionManager())

        with pytest.raises(NotAuthenticatedError):
            await service.get_achievements()
        with pytest.raises(NotAuthenticatedError):
            await service.unlock_achievement("first")

    @pytest.mark.asyncio
    async def test_malformed_achievements_are_wrapped(self):
        http = make_http(get={"achievements": [{"id": "x"}]})
        service = AchievementService(http, MemorySessionManager("sess-1"))

        with pytest.raises(GamploError, match="Failed to get achievements"):
            await service.get_achievements()

    @pytest.mark.asyncio
    async def test_malformed_unlock_response_is_wrapped(self):
        http = make_http(post={"alreadyUnlocked": "maybe"})
        service = AchievementService(http, MemorySessionManager("sess-1"))

        with pytest.raises(GamploError, match="Failed to unlock achievement"):
            await service.unlock_achievement("first")
