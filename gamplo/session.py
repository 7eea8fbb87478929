"""In-memory session storage."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class MemorySessionManager:
    """Holds the single current session id for one client."""

    def __init__(self, session_id: Optional[str] = None):
        self._session_id = session_id

    def get_session_id(self) -> Optional[str]:
        return self._session_id

    def set_session_id(self, session_id: str) -> None:
        self._session_id = session_id
        logger.debug("Session id updated")

    def clear_session(self) -> None:
        self._session_id = None
