"""
Local rate limiting and X API rate limit header parsing.

The limiter is advisory: it does not mirror the real X quota, it only bounds
the local burst rate per logical endpoint and tells the caller how long to
back off.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Mapping

from x_gateway.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 15 * 60
DEFAULT_THRESHOLD = 100

POSTS_CREATE = "tweets/create"
POSTS_DELETE = "tweets/delete"
MEDIA_UPLOAD = "media/upload"
RETWEETS_CREATE = "retweets/create"
RETWEETS_DELETE = "retweets/delete"
USERS_BY_USERNAME = "users/by/username"
USERS_BY_ID = "users"
USERS_TIMELINE = "users/timeline"
POSTS_SEARCH = "tweets/search"


@dataclass(slots=True)
class RateWindow:
    """Admission counter for one endpoint within one fixed window."""

    endpoint_key: str
    count: int
    reset_at: float


@dataclass(slots=True)
class RateLimiter:
    """Fixed-window admission control, one window per endpoint key."""

    threshold: int = DEFAULT_THRESHOLD
    window_seconds: float = WINDOW_SECONDS
    clock: Callable[[], float] = field(default=time.monotonic)
    _windows: dict[str, RateWindow] = field(default_factory=dict, init=False, repr=False)

    def admit(self, endpoint_key: str) -> None:
        """
        Admit one call for ``endpoint_key`` or refuse it immediately.

        Raises:
            RateLimitExceeded: when the window budget is spent; ``retry_after``
                holds the seconds left until the window resets.
        """
        now = self.clock()
        window = self._windows.get(endpoint_key)

        if window is None or now >= window.reset_at:
            self._windows[endpoint_key] = RateWindow(
                endpoint_key=endpoint_key,
                count=1,
                reset_at=now + self.window_seconds,
            )
            return

        if window.count < self.threshold:
            window.count += 1
            return

        wait = window.reset_at - now
        logger.warning(
            "Local rate limit reached for %s (%d calls); reset in %.0fs",
            endpoint_key,
            window.count,
            wait,
        )
        raise RateLimitExceeded(
            f"Rate limit exceeded for {endpoint_key}. Reset in {int(wait + 0.999)}s",
            retry_after=wait,
            upstream_code="rate_limit_exceeded",
        )

    def snapshot(self, endpoint_key: str) -> RateWindow | None:
        window = self._windows.get(endpoint_key)
        return replace(window) if window is not None else None


@dataclass(slots=True)
class RateLimitInfo:
    """Rate limit metadata parsed from X API response headers."""

    limit: int | None = None
    remaining: int | None = None
    reset_at: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str] | None) -> "RateLimitInfo":
        if not headers:
            return cls()
        lowered = {str(key).lower(): value for key, value in headers.items()}
        return cls(
            limit=_to_int(lowered.get("x-rate-limit-limit")),
            remaining=_to_int(lowered.get("x-rate-limit-remaining")),
            reset_at=_to_int(lowered.get("x-rate-limit-reset")),
        )

    def seconds_until_reset(self) -> float | None:
        if self.reset_at is None:
            return None
        now = datetime.now(timezone.utc).timestamp()
        return max(self.reset_at - now, 0.0)


def _to_int(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
