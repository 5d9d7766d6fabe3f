"""
In-memory sliding-window rate limiting, keyed by client address.

One limiter instance is built per app (see `main.create_app`) and shared by
every route that depends on `enforce_auth_rate_limit`, so register and login
draw from the same budget.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Callable

from fastapi import Request

from .errors import RateLimited

logger = logging.getLogger(__name__)

AUTH_RATE_LIMIT_MESSAGE = "Too many authentication attempts. Please try again later."


class SlidingWindowLimiter:
    def __init__(
        self,
        *,
        max_attempts: int,
        window_s: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max(1, max_attempts)
        self.window_s = max(1.0, float(window_s))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> float | None:
        """
        Record one attempt for `key`.

        Returns None when the attempt is allowed, otherwise the number of
        seconds until the oldest attempt in the window expires. Rejected
        attempts are not recorded.
        """
        now = self._clock()
        window_start = now - self.window_s
        if now - self._last_sweep >= self.window_s:
            self._sweep(window_start)
            self._last_sweep = now

        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_attempts:
            return max(0.0, hits[0] + self.window_s - now)

        hits.append(now)
        return None

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _sweep(self, window_start: float) -> None:
        # Drop addresses whose newest attempt has left the window.
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in stale:
            del self._hits[key]

    def reset(self) -> None:
        self._hits.clear()


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_auth_rate_limit(request: Request) -> None:
    limiter: SlidingWindowLimiter = request.app.state.auth_limiter
    address = client_address(request)
    retry_after = limiter.hit(address)
    if retry_after is None:
        return None

    logger.warning("auth_rate_limited client=%s path=%s", address, request.url.path)
    raise RateLimited(
        AUTH_RATE_LIMIT_MESSAGE,
        headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
    )
