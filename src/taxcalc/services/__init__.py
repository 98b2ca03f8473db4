"""Caching, rate limiting and request coordination."""

from taxcalc.services.cache import CacheKey, LRUCache, ResponseCache
from taxcalc.services.coordinator import RequestCoordinator, RequestParams
from taxcalc.services.rate_limiter import RateLimiter

__all__ = [
    "CacheKey",
    "LRUCache",
    "RateLimiter",
    "RequestCoordinator",
    "RequestParams",
    "ResponseCache",
]
