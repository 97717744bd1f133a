import redis

from devgad.core.rate_limiter import LoginRateLimiter


class FakeRedis:
    def __init__(self):
        self.sets = {}

    def zremrangebyscore(self, key, low, high):
        entries = self.sets.setdefault(key, {})
        for member, score in list(entries.items()):
            if low <= score <= high:
                del entries[member]

    def zcard(self, key):
        return len(self.sets.get(key, {}))

    def zadd(self, key, mapping):
        self.sets.setdefault(key, {}).update(mapping)

    def expire(self, key, seconds):
        return True


class DownRedis:
    def zremrangebyscore(self, *args):
        raise redis.ConnectionError("connection refused")


def test_disabled_without_redis():
    limiter = LoginRateLimiter()
    assert limiter.enabled is False
    assert all(limiter.is_allowed("asha@devgadhapus.in", max_requests=1) for _ in range(5))


def test_blocks_after_max_attempts_per_email():
    limiter = LoginRateLimiter(redis_client=FakeRedis())
    results = [limiter.is_allowed("Asha@DevgadHapus.in", max_requests=3, window_seconds=60) for _ in range(4)]
    assert results == [True, True, True, False]
    assert limiter.is_allowed("ravi@devgadhapus.in", max_requests=3, window_seconds=60)


def test_fails_open_when_redis_is_down():
    limiter = LoginRateLimiter(redis_client=DownRedis())
    assert limiter.is_allowed("asha@devgadhapus.in")
