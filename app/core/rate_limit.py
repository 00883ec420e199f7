import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Depends, HTTPException, status

from app.core.config import settings
from app.modules.auth.models import User
from app.modules.auth.services import get_current_user

# Configure logging
logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Per-key sliding window limiter: at most `limit` hits per `window_seconds`.
    In-process only, each worker keeps its own counters.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Optional[Callable[[], float]] = None):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> float:
        """
        Record a hit for key.

        Returns:
            0 if the hit is allowed, otherwise the seconds until a slot frees up
        """
        with self._lock:
            now = self.clock()
            window_start = now - self.window_seconds

            self._drop_idle_keys(window_start)
            hits = self._hits.setdefault(key, deque())
            # Drop hits that left the window
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= self.limit:
                return max(0.0, (hits[0] + self.window_seconds) - now)

            hits.append(now)
            return 0.0

    def _drop_idle_keys(self, window_start: float):
        # Keys whose newest hit left the window
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= window_start]:
            del self._hits[key]

    def reset(self, key: Optional[str] = None):
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


search_rate_limiter = SlidingWindowRateLimiter(
    settings.SEARCH_RATE_LIMIT,
    settings.SEARCH_RATE_WINDOW_SECONDS
)


def get_search_rate_limiter() -> SlidingWindowRateLimiter:
    return search_rate_limiter


def limit_search_rate(
    current_user: User = Depends(get_current_user),
    limiter: SlidingWindowRateLimiter = Depends(get_search_rate_limiter)
) -> User:
    """
    Dependency throttling the search stream per user.

    Raises:
        HTTPException: 429 with a Retry-After header when the user is over the limit
    """
    retry_after = limiter.hit(f"search:{current_user.id}")
    if retry_after > 0:
        logger.warning(f"Search rate limit hit by user {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many search requests, please try again later",
            headers={"Retry-After": str(max(1, int(retry_after + 0.999)))}
        )
    return current_user
