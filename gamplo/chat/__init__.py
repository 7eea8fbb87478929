"""
Gamplo live chat streaming with retry and cancellation.
"""

from gamplo.chat.cancellation import CancellationToken
from gamplo.chat.client import ChatClient, validate_room_id
from gamplo.chat.connection import ChatConnection, ConnectionState
from gamplo.chat.decoder import StreamDecoder, iter_events, parse_event_line
from gamplo.chat.reconnect import BackoffRetrier

__all__ = [
    "BackoffRetrier",
    "CancellationToken",
    "ChatClient",
    "ChatConnection",
    "ConnectionState",
    "StreamDecoder",
    "iter_events",
    "parse_event_line",
    "validate_room_id",
]
