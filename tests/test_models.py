"""Tests for data models."""

import pytest
from pydantic import ValidationError

from gamplo.models import (
    Achievement,
    AuthResponse,
    ChatEvent,
    ChatMessage,
    GamploConfig,
    UnlockAchievementResponse,
)

from conftest import message_payload


def test_chat_message_from_wire():
    """Test creating a chat message from camelCase wire fields."""
    message = ChatMessage.model_validate(message_payload(text="hello"))

    assert message.id == "m1"
    assert message.user_id == "u1"
    assert message.username == "a"
    assert message.display_name == "A"
    assert message.message == "hello"
    assert message.timestamp == 1000


def test_chat_message_accepts_null_image():
    message = ChatMessage.model_validate({**message_payload(), "image": None})

    assert message.image is None


def test_chat_message_is_immutable():
    """Test that chat messages cannot be modified."""
    message = ChatMessage.model_validate(message_payload())

    with pytest.raises(ValidationError):
        message.message = "changed"


def test_chat_event_message():
    """Test a message event carries its chat message."""
    event = ChatEvent.model_validate({"type": "message", "data": message_payload()})

    assert event.type == "message"
    assert event.data.message == "hi"


def test_chat_event_connected_has_no_data():
    event = ChatEvent.model_validate({"type": "connected"})

    assert event.type == "connected"
    assert event.data is None


def test_chat_event_rejects_unknown_type():
    with pytest.raises(ValidationError):
        ChatEvent.model_validate({"type": "typing"})


def test_auth_response():
    """Test parsing an auth response."""
    auth = AuthResponse.model_validate({
        "sessionId": "sess-1",
        "player": {"id": "p1", "username": "ace", "displayName": "Ace", "image": ""},
    })

    assert auth.session_id == "sess-1"
    assert auth.player.display_name == "Ace"


def test_achievement_optional_fields():
    achievement = Achievement.model_validate({
        "id": 7,
        "key": "first_win",
        "title": "First Win",
        "description": "Win a game",
        "icon": "trophy.png",
        "points": 10,
        "hidden": False,
        "unlocked": True,
        "unlockedAt": "2024-01-01T00:00:00Z",
    })

    assert achievement.unlocked is True
    assert achievement.unlocked_at == "2024-01-01T00:00:00Z"


def test_unlock_response():
    result = UnlockAchievementResponse.model_validate({
        "success": True,
        "alreadyUnlocked": True,
        "achievement": {"key": "k", "title": "T", "description": "", "icon": "", "points": 5},
    })

    assert result.already_unlocked is True
    assert result.achievement.points == 5


def test_config_defaults():
    config = GamploConfig()

    assert config.api_url == "https://gamplo.com"
    assert config.timeout_ms == 10000
    assert config.chat_max_retries == 3
    assert config.chat_base_delay_ms == 1000
