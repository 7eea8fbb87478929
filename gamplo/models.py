"""Data models and schemas for the Gamplo API."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Player(BaseModel):
    """A Gamplo player."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    display_name: str = Field(alias="displayName")
    image: Optional[str] = ""


class Achievement(BaseModel):
    """An achievement defined for the current game."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    key: str
    title: str
    description: str = ""
    icon: str = ""
    points: int = 0
    hidden: bool = False
    unlocked: Optional[bool] = None
    unlocked_at: Optional[str] = Field(default=None, alias="unlockedAt")


class UnlockedAchievement(BaseModel):
    """Achievement summary returned by an unlock request."""

    key: str
    title: str
    description: str = ""
    icon: str = ""
    points: int = 0


class UnlockAchievementResponse(BaseModel):
    """Response to an unlock request."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    already_unlocked: bool = Field(default=False, alias="alreadyUnlocked")
    achievement: UnlockedAchievement


class AuthResponse(BaseModel):
    """Response to a token exchange."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    player: Player


class SendMessageResponse(BaseModel):
    """Response to a chat send request."""

    success: bool


class ChatMessage(BaseModel):
    """A chat message delivered by the room stream. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    username: str
    display_name: str = Field(alias="displayName")
    image: Optional[str] = ""
    message: str
    timestamp: Union[int, float]  # Epoch milliseconds


class ChatEvent(BaseModel):
    """One decoded event of the chat stream."""

    model_config = ConfigDict(frozen=True)

    type: Literal["connected", "message"]
    data: Optional[ChatMessage] = None


class GamploConfig(BaseModel):
    """Configuration model."""

    # API settings
    api_url: str = "https://gamplo.com"
    timeout_ms: int = 10000

    # Chat stream retry settings
    chat_max_retries: int = 3
    chat_base_delay_ms: int = 1000
    chat_jitter_ms: int = 1000

    # Chat stream decoding
    stream_encoding: str = "utf-8"
