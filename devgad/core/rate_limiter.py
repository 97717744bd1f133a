import secrets
import time
import logging
from typing import Optional
import redis
from devgad.core.config import settings

logger = logging.getLogger("rate_limiter")

class LoginRateLimiter:
    """Sliding window limiter for sign-in attempts, keyed by email"""

    def __init__(self, redis_client: Optional[redis.Redis] = None, redis_url: Optional[str] = None):
        if redis_client is None and redis_url:
            redis_client = redis.Redis.from_url(redis_url, decode_responses=True)
        self.redis_client = redis_client

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    def is_allowed(self, identifier: str, max_requests: Optional[int] = None, window_seconds: Optional[int] = None) -> bool:
        """
        Record one attempt and report whether it is inside the limit.
        Always True when no Redis is configured or Redis is unreachable.
        """
        if not self.enabled:
            return True

        max_requests = max_requests or settings.MAX_LOGIN_ATTEMPTS
        window_seconds = window_seconds or settings.LOGIN_LOCKOUT_MINUTES * 60
        current_time = time.time()
        window_start = current_time - window_seconds
        key = f"login_limit:{identifier.strip().lower()}"

        try:
            # Remove old entries outside the window
            self.redis_client.zremrangebyscore(key, 0, window_start)

            if self.redis_client.zcard(key) >= max_requests:
                return False

            self.redis_client.zadd(key, {f"{current_time:.6f}:{secrets.token_hex(4)}": current_time})
            self.redis_client.expire(key, window_seconds)
            return True

        except redis.RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return True

rate_limiter = LoginRateLimiter(redis_url=settings.REDIS_URL)
