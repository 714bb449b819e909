"""Sliding-window rate limiting for the admin login endpoint"""

import time
from typing import Callable, Optional
from fastapi import Request

from backend.app.core.config import settings
from backend.app.core.exceptions import RateLimitException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)


class LoginRateLimiter:
    """In-memory sliding window keyed by client address

    Every attempt counts, successful or not. Once ``max_attempts`` attempts
    fall inside the window, further attempts are refused until the oldest
    one ages out.
    """

    def __init__(
        self,
        max_attempts: int = settings.LOGIN_RATE_LIMIT_ATTEMPTS,
        window_seconds: int = settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
        clock: Optional[Callable[[], float]] = None
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.clock = clock or time.monotonic
        self.attempts: dict[str, list[float]] = {}

    def hit(self, key: str) -> None:
        """Record an attempt for ``key`` or raise RateLimitException"""
        current_time = self.clock()

        recent = [
            attempt for attempt in self.attempts.get(key, [])
            if current_time - attempt < self.window_seconds
        ]

        if len(recent) >= self.max_attempts:
            self.attempts[key] = recent
            retry_after = int(self.window_seconds - (current_time - recent[0])) + 1
            logger.warning(
                f"Login rate limit exceeded for client: {key}",
                extra={"client_ip": key}
            )
            raise RateLimitException(
                "Too many login attempts. Please try again later.",
                retry_after=retry_after
            )

        recent.append(current_time)
        self.attempts[key] = recent

    def remaining(self, key: str) -> int:
        current_time = self.clock()
        recent = [
            attempt for attempt in self.attempts.get(key, [])
            if current_time - attempt < self.window_seconds
        ]
        return max(self.max_attempts - len(recent), 0)

    def reset(self) -> None:
        self.attempts.clear()

    async def __call__(self, request: Request) -> None:
        client_ip = request.client.host if request.client else "unknown"
        self.hit(client_ip)


# Shared limiter used as a dependency by the login route
login_rate_limiter = LoginRateLimiter()
