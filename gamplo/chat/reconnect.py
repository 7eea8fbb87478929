"""
Retry executor with exponential backoff and jitter.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from gamplo.chat.cancellation import CancellationToken

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackoffRetrier:
    """
    Runs an operation until it succeeds or the retry budget is spent.

    Implements the strategy:
    - 1 initial attempt + max_attempts retries
    - wait base * 2^i + random jitter in [0, jitter) after failed attempt i
    - re-raise the last error once the final attempt fails
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: float = 1000,
        jitter_ms: float = 1000,
    ):
        """
        Initialize the retrier.

        Args:
            max_attempts: Number of retries after the initial attempt
            base_delay_ms: Delay before the first retry, doubled for each one after
            jitter_ms: Upper bound (exclusive) of the random delay added to each wait
        """
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

        self._max_attempts = max_attempts
        self._base_delay_ms = base_delay_ms
        self._jitter_ms = jitter_ms

        self._attempts = 0

    def delay_for(self, attempt: int) -> float:
        """Get the wait in seconds after failed attempt `attempt` (0-indexed)."""
        jitter = random.random() * self._jitter_ms
        return (self._base_delay_ms * 2 ** attempt + jitter) / 1000.0

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Run `operation` with retries.

        Args:
            operation: Zero-argument coroutine function
            token: Cancellation token; once cancelled, remaining attempts
                fail fast without calling `operation` and waits are skipped

        Returns:
            The result of the first successful attempt

        Raises:
            The last error raised by `operation` when every attempt fails
        """
        last_error: Optional[BaseException] = None
        self._attempts = 0

        for attempt in range(self._max_attempts + 1):
            self._attempts = attempt + 1
            try:
                if token is not None:
                    token.raise_if_cancelled()
                return await operation()
            except Exception as e:
                last_error = e

            if attempt == self._max_attempts:
                break

            delay = self.delay_for(attempt)
            if token is not None and token.cancelled:
                logger.debug(f"Attempt {attempt + 1} skipped, connection cancelled")
            else:
                logger.info(
                    f"Attempt {attempt + 1}/{self._max_attempts + 1} failed: {last_error}; "
                    f"retrying in {delay:.1f}s"
                )

            if token is not None:
                await token.sleep(delay)
            else:
                await asyncio.sleep(delay)

        raise last_error

    @property
    def attempts(self) -> int:
        """Get the number of attempts made by the last execute()."""
        return self._attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def base_delay_ms(self) -> float:
        return self._base_delay_ms
