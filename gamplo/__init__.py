"""Gamplo - Python client for the Gamplo game platform SDK API."""

from gamplo.chat import BackoffRetrier, CancellationToken, ChatClient, ConnectionState
from gamplo.config import get_gamplo_token, load_config
from gamplo.exceptions import (
    AuthenticationError,
    ConnectionCancelledError,
    GamploError,
    NotAuthenticatedError,
    ParseError,
    TransportError,
    ValidationError,
)
from gamplo.http import HttpClient
from gamplo.models import (
    Achievement,
    AuthResponse,
    ChatEvent,
    ChatMessage,
    GamploConfig,
    Player,
    SendMessageResponse,
    UnlockAchievementResponse,
)
from gamplo.sdk import GamploSDK
from gamplo.session import MemorySessionManager

__version__ = "0.1.0"

__all__ = [
    "Achievement",
    "AuthResponse",
    "AuthenticationError",
    "BackoffRetrier",
    "CancellationToken",
    "ChatClient",
    "ChatEvent",
    "ChatMessage",
    "ConnectionCancelledError",
    "ConnectionState",
    "GamploConfig",
    "GamploError",
    "GamploSDK",
    "HttpClient",
    "MemorySessionManager",
    "NotAuthenticatedError",
    "ParseError",
    "Player",
    "SendMessageResponse",
    "TransportError",
    "UnlockAchievementResponse",
    "ValidationError",
    "get_gamplo_token",
    "load_config",
]
