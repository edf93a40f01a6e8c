"""Rate limiting middleware for controlling request rates.

This middleware uses pyrate_limiter to enforce rate limits on outgoing
requests. It supports adaptive rate limiting that automatically reduces the
rate when receiving 429 (Too Many Requests) responses.
"""

import logging
import time
from threading import Lock

import httpx
from pyrate_limiter import Duration, Limiter, Rate

from reqchain.common.handlers import Handler, HandlerFunc
from reqchain.context import Context

logger = logging.getLogger(__name__)


class RateLimitMiddleware:
    """Middleware that enforces rate limits on outgoing requests.

    Each request blocks before delegating until the limiter admits it. On a
    429 response the interval is increased by ``adaptive_increase`` (10% by
    default), reducing the rate to about 91% of the previous rate.

    Place it after any short-circuiting middleware (such as a cache) so
    requests that never reach the network are not counted.

    Example:
        # Limit to 1 request per second
        rate_limiter = RateLimitMiddleware(requests_per_second=1.0)

        # Limit to 10 requests per minute
        rate_limiter = RateLimitMiddleware(requests_per_minute=10)

        chain = Chain(cache, rate_limiter)
    """

    def __init__(
        self,
        requests_per_second: float | None = None,
        requests_per_minute: float | None = None,
        adaptive: bool = True,
        adaptive_increase: float = 0.10,
    ) -> None:
        """Initialize the rate limit middleware.

        Args:
            requests_per_second: Maximum requests per second. Takes precedence
                over requests_per_minute if both are provided.
            requests_per_minute: Maximum requests per minute. Only used if
                requests_per_second is not provided.
            adaptive: Whether to automatically reduce rate on 429 responses.
            adaptive_increase: Factor to increase interval by when adapting (0.10 = 10% slower).

        Raises:
            ValueError: If neither requests_per_second nor requests_per_minute
                is provided, or the rate is not positive.
        """
        if requests_per_second is None and requests_per_minute is None:
            raise ValueError(
                "Must provide either requests_per_second or requests_per_minute"
            )

        if requests_per_second is not None:
            self.current_rate: float = requests_per_second
            self.duration = Duration.SECOND
        else:
            self.current_rate = requests_per_minute  # type: ignore[assignment]
            self.duration = Duration.MINUTE

        if self.current_rate <= 0:
            raise ValueError("Rate must be positive")

        self.adaptive = adaptive
        self.adaptive_increase = adaptive_increase
        self._lock = Lock()
        self._create_limiter()

        self.total_requests = 0
        self.total_wait_time = 0.0
        self.adaptive_reductions = 0

    def _create_limiter(self) -> None:
        # One slot per interval, so fractional rates keep their precision
        interval_ms = max(1, int(self.duration.value / self.current_rate))
        rate = Rate(1, interval_ms)
        # max_delay lets the limiter sleep instead of raising
        self.limiter = Limiter(rate, max_delay=Duration.HOUR)

    def wrap(self, next_handler: Handler) -> Handler:
        def handle(
            ctx: Context | None, request: httpx.Request
        ) -> httpx.Response | None:
            self._acquire()
            response = next_handler.handle(ctx, request)
            if (
                self.adaptive
                and response is not None
                and response.status_code == 429
            ):
                self._reduce_rate()
            return response

        return HandlerFunc(handle)

    def _acquire(self) -> None:
        """Block until the limiter admits one more request."""
        start_time = time.time()

        with self._lock:
            self.limiter.try_acquire("default")
            self.total_requests += 1

        self.total_wait_time += time.time() - start_time

    def _reduce_rate(self) -> None:
        """Reduce the current rate limit (adaptive rate limiting).

        Increasing the interval by X% means reducing the rate by a factor
        of 1/(1+X).
        """
        with self._lock:
            old_rate = self.current_rate
            self.current_rate = self.current_rate / (
                1.0 + self.adaptive_increase
            )
            self._create_limiter()
            self.adaptive_reductions += 1

        logger.info(
            f"Rate limit reduced from {old_rate:.2f} to "
            f"{self.current_rate:.2f} requests per "
            f"{'second' if self.duration == Duration.SECOND else 'minute'}",
            extra={
                "old_rate": old_rate,
                "new_rate": self.current_rate,
                "adaptive_reductions": self.adaptive_reductions,
            },
        )

    def get_stats(self) -> dict[str, int | float]:
        """Get statistics about rate limiting.

        Returns:
            Dictionary with stats about requests, wait time, and adaptations.
        """
        with self._lock:
            avg_wait = (
                self.total_wait_time / self.total_requests
                if self.total_requests > 0
                else 0.0
            )
            return {
                "total_requests": self.total_requests,
                "total_wait_time": self.total_wait_time,
                "average_wait_time": avg_wait,
                "current_rate": self.current_rate,
                "adaptive_reductions": self.adaptive_reductions,
            }
