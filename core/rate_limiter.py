# =============================================================================
# core/rate_limiter.py  —  Rolling one-minute request window
# =============================================================================
#
# Asana allows 1500 requests per minute per token.  The client stays well
# below that with a conservative ceiling (100/minute by default).
#
# HOW IT WORKS:
#   A RequestWindow holds a counter and the moment the window resets.  Before
#   every outbound call the client awaits RateLimiter.acquire():
#     1. If the window has expired, start a fresh one (count = 0).
#     2. If the counter already reached the ceiling, sleep until the reset
#        moment, then start a fresh window.
#     3. Count this request.
#   The window is reset wholesale; there is no sliding log of timestamps.
#
#   Each AsanaClient owns its own RateLimiter, so two clients (e.g. in tests)
#   never share a window.
# =============================================================================

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class RequestWindow:
    """Request count for the current window and when the window resets."""

    count: int
    reset_at: float


class RateLimiter:
    """Delays callers that would exceed ``max_requests`` per window.

    The limiter never fails; it only suspends the caller.  ``clock`` and
    ``sleep`` can be swapped out to drive time from tests.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self.window = RequestWindow(count=0, reset_at=clock() + window_seconds)

    def _start_window(self, now: float) -> None:
        self.window.count = 0
        self.window.reset_at = now + self.window_seconds

    async def acquire(self) -> None:
        """Wait until a request may be issued, then count it."""
        now = self._clock()

        if now >= self.window.reset_at:
            self._start_window(now)

        if self.window.count >= self.max_requests:
            wait_seconds = self.window.reset_at - now
            logger.warning(
                "Rate limit of %d requests/%.0fs reached, waiting %.1fs",
                self.max_requests, self.window_seconds, wait_seconds,
            )
            await self._sleep(wait_seconds)
            self._start_window(self._clock())

        self.window.count += 1
