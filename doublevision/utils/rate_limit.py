from dataclasses import dataclass
from datetime import datetime, timezone
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: datetime


class RateLimiter:
    """Fixed-window limiter keyed by an arbitrary identifier, e.g. a user id"""
    
    def __init__(self, limit: str, namespace: str = 'default'):
        self.item = parse(limit)
        self.namespace = namespace
        self.storage = MemoryStorage()
        self.limiter = FixedWindowRateLimiter(self.storage)
    
    def check(self, key) -> RateLimitResult:
        """Consume one hit for key and report whether it was allowed"""
        allowed = self.limiter.hit(self.item, self.namespace, str(key))
        stats = self.limiter.get_window_stats(self.item, self.namespace, str(key))
        reset_at = datetime.fromtimestamp(stats.reset_time, tz=timezone.utc).replace(tzinfo=None)
        return RateLimitResult(allowed=allowed, remaining=stats.remaining, reset_at=reset_at)
    
    def reset(self):
        """Forget every window"""
        self.storage.reset()
