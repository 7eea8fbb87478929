"""
Cooperative cancellation shared by the retry loop and the read loop.
"""

import asyncio
from typing import Optional

from gamplo.exceptions import ConnectionCancelledError


class CancellationToken:
    """
    A cancellation flag for one room connection.

    Checking it is a cheap property read. Cancelling also cancels the bound
    task, so a pending HTTP request, chunk read or backoff wait is aborted
    instead of being ignored once it completes.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def bind(self, task: asyncio.Task) -> None:
        """Tie the token to the task running the connection."""
        self._task = task
        if self.cancelled:
            task.cancel()

    def cancel(self) -> None:
        if self._event.is_set():
            return

        self._event.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ConnectionCancelledError()

    async def sleep(self, seconds: float) -> None:
        """Wait for `seconds`, returning early once cancelled."""
        if self.cancelled:
            return

        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
