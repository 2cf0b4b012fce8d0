"""
Rate limiting stores.

A store counts hits per key inside a fixed window. The application creates one
store in its lifespan (Redis when REDIS_URL is configured, otherwise an
in-process TTL map) and hands it to the endpoints through a dependency.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import redis

logger = logging.getLogger(__name__)


class RateLimitStore(Protocol):
    def hit(self, key: str, window_seconds: int, cost: int = 1) -> Tuple[int, float]:
        """Add ``cost`` to the counter of ``key``; return (count, seconds until reset)."""
        ...

    def reset(self, key: Optional[str] = None) -> None:
        ...


class MemoryRateLimitStore:
    """Fixed-window counters kept in memory, evicted once their window has passed."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_every: int = 256):
        self._clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._sweep_every = sweep_every
        self._calls = 0

    def hit(self, key: str, window_seconds: int, cost: int = 1) -> Tuple[int, float]:
        now = self._clock()
        with self._lock:
            self._calls += 1
            if self._calls % self._sweep_every == 0:
                self._evict(now)
            count, reset_at = self._hits.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += cost
            self._hits[key] = (count, reset_at)
            return count, reset_at - now

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)

    def _evict(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._hits.items() if reset_at <= now]
        for k in expired:
            del self._hits[k]

    def __len__(self) -> int:
        return len(self._hits)


class RedisRateLimitStore:
    """Fixed-window counters in Redis, shared by every API instance."""

    def __init__(self, client: redis.Redis, prefix: str = "rate_limit"):
        self.redis_client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisRateLimitStore":
        return cls(redis.from_url(url, decode_responses=True))

    def hit(self, key: str, window_seconds: int, cost: int = 1) -> Tuple[int, float]:
        now = int(time.time())
        window_key = f"{self.prefix}:{key}:{now // window_seconds}"
        pipe = self.redis_client.pipeline()
        pipe.incr(window_key, cost)
        pipe.expire(window_key, window_seconds * 2)  # Double window for cleanup
        count, _ = pipe.execute()
        reset_at = (now // window_seconds + 1) * window_seconds
        return int(count), float(reset_at - now)

    def reset(self, key: Optional[str] = None) -> None:
        pattern = f"{self.prefix}:{key}:*" if key else f"{self.prefix}:*"
        keys = self.redis_client.keys(pattern)
        if keys:
            self.redis_client.delete(*keys)


class RateLimiter:
    """Allow at most ``limit`` hits per ``window_seconds`` for each key."""

    def __init__(self, store: RateLimitStore, limit: int, window_seconds: int, enabled: bool = True):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds
        self.enabled = enabled

    def is_allowed(self, key: str, cost: int = 1) -> Tuple[bool, Dict[str, Any]]:
        if not self.enabled:
            return True, {"allowed": True}
        try:
            count, reset_in = self.store.hit(key, self.window_seconds, cost)
        except redis.RedisError:
            # If Redis is down, allow request (fail open)
            logger.warning("Rate limit store unavailable; allowing request", exc_info=True)
            return True, {"allowed": True, "error": "cache_unavailable"}

        allowed = count <= self.limit
        return allowed, {
            "allowed": allowed,
            "current": count,
            "limit": self.limit,
            "remaining": max(0, self.limit - count),
            "reset_in": max(1, int(round(reset_in))),
        }


def create_rate_limit_store(redis_url: Optional[str]) -> RateLimitStore:
    if redis_url:
        logger.info("Using Redis rate limit store")
        return RedisRateLimitStore.from_url(redis_url)
    return MemoryRateLimitStore()
