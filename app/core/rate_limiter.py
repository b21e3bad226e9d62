"""
Rate limiting for write endpoints (swipes, messages) to prevent abuse.
"""
import time
import asyncio
import logging
from collections import defaultdict
from typing import Dict, Tuple
from app.core.config import settings
from app.core.exceptions import RateLimitExceeded
from app.config.constants import (
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMITER_CLEANUP_INTERVAL_HOURS,
    RATE_LIMITER_INACTIVE_USER_THRESHOLD_HOURS
)

logger = logging.getLogger(__name__)

BUCKET_SWIPE = "swipe"
BUCKET_MESSAGE = "message"


class RateLimiter:
    """
    Sliding-window rate limiter.
    Tracks request timestamps per (bucket, user) and enforces per-bucket limits.
    Process-local, like the realtime room registry.
    """

    def __init__(
        self,
        limits: Dict[str, int],
        time_window: int = 60,
        cleanup_interval_hours: int = 24
    ):
        """
        Initialize rate limiter.

        Args:
            limits: Maximum requests per time window, keyed by bucket name
            time_window: Time window in seconds
            cleanup_interval_hours: Hours between cleanup of inactive users
        """
        self.limits = limits
        self.time_window = time_window
        self.cleanup_interval_hours = cleanup_interval_hours

        # Storage: bucket -> user_id -> list of timestamps
        self.request_history: Dict[str, Dict[str, list]] = defaultdict(lambda: defaultdict(list))

        self._cleanup_task = None

    def _clean_old_requests(self, bucket: str, user_id: str, current_time: float):
        """Remove expired requests from history."""
        history = self.request_history[bucket]
        history[user_id] = [
            timestamp for timestamp in history[user_id]
            if current_time - timestamp < self.time_window
        ]

    def cleanup_inactive_users(self, now: float = None) -> int:
        """
        Remove users with no activity for RATE_LIMITER_INACTIVE_USER_THRESHOLD_HOURS.

        Returns:
            Number of (bucket, user) entries removed
        """
        current_time = time.time() if now is None else now
        inactive_threshold = RATE_LIMITER_INACTIVE_USER_THRESHOLD_HOURS * 3600

        removed = 0
        for history in self.request_history.values():
            for user_id, timestamps in list(history.items()):
                if not timestamps or current_time - max(timestamps) > inactive_threshold:
                    history.pop(user_id, None)
                    removed += 1

        if removed:
            logger.info(f"Cleaned up {removed} inactive entries from rate limiter")

        return removed

    async def _periodic_cleanup(self):
        """Periodic cleanup task that runs every cleanup_interval_hours."""
        while True:
            try:
                await asyncio.sleep(self.cleanup_interval_hours * 3600)
                self.cleanup_inactive_users()
            except asyncio.CancelledError:
                logger.info("Rate limiter cleanup task cancelled")
                break
            except Exception as e:
                logger.exception(f"Error in rate limiter cleanup: {e}")

    def start_cleanup_task(self):
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._periodic_cleanup())
            logger.info(f"Started rate limiter cleanup task (interval: {self.cleanup_interval_hours}h)")

    def stop_cleanup_task(self):
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            logger.info("Stopped rate limiter cleanup task")

    def check_rate_limit(self, bucket: str, user_id: str) -> Tuple[bool, int]:
        """
        Check if user has exceeded the limit of a bucket.

        Returns:
            Tuple of (is_allowed, seconds_until_reset)
        """
        max_req = self.limits.get(bucket)
        if not max_req:
            return True, 0

        current_time = time.time()
        self._clean_old_requests(bucket, user_id, current_time)
        history = self.request_history[bucket][user_id]

        if len(history) >= max_req:
            oldest_request = min(history)
            seconds_until_reset = int(self.time_window - (current_time - oldest_request)) + 1
            return False, seconds_until_reset

        history.append(current_time)
        return True, 0

    def enforce(self, bucket: str, user_id: str):
        """Raise RateLimitExceeded when the user is over the bucket limit."""
        allowed, wait_time = self.check_rate_limit(bucket, user_id)
        if not allowed:
            logger.warning(f"Rate limit '{bucket}' exceeded for user {user_id}. Wait time: {wait_time}s")
            raise RateLimitExceeded(wait_time)

    def refund(self, bucket: str, user_id: str):
        """Give back the most recent slot, for a request that was rejected without effect."""
        history = self.request_history[bucket].get(user_id)
        if history:
            history.remove(max(history))

    def reset(self):
        self.request_history.clear()


# Global rate limiter instance
rate_limiter = RateLimiter(
    limits={
        BUCKET_SWIPE: settings.SWIPES_PER_MINUTE,
        BUCKET_MESSAGE: settings.MESSAGES_PER_MINUTE,
    },
    time_window=RATE_LIMIT_WINDOW_SECONDS,
    cleanup_interval_hours=RATE_LIMITER_CLEANUP_INTERVAL_HOURS,
)
