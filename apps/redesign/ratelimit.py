import time
from django.core.cache import cache

class RateLimiter:
    """Fixed-window request limiter backed by Django's cache."""

    def __init__(self, key: str, max_requests: int, window_seconds: int):
        self.key = key
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def _cache_key(self, identity) -> str:
        return f"ratelimit:{self.key}:{identity}"

    def _entry(self, identity, now: float) -> dict:
        entry = cache.get(self._cache_key(identity))
        if not entry or now >= entry["reset_at"]:
            entry = {"count": 0, "reset_at": now + self.window_seconds}
        return entry

    def check(self, identity, now: float = None) -> bool:
        """Count one request. Returns False when the window is already full."""
        now = now if now is not None else time.time()
        entry = self._entry(identity, now)
        if entry["count"] >= self.max_requests:
            return False
        entry["count"] += 1
        cache.set(self._cache_key(identity), entry, max(1, int(entry["reset_at"] - now) + 1))
        return True

    def remaining(self, identity, now: float = None) -> int:
        now = now if now is not None else time.time()
        return max(0, self.max_requests - self._entry(identity, now)["count"])

    def seconds_until_reset(self, identity, now: float = None) -> int:
        now = now if now is not None else time.time()
        entry = cache.get(self._cache_key(identity))
        if not entry:
            return 0
        return max(0, int(round(entry["reset_at"] - now)))
