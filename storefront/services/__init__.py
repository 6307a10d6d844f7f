from .cache import ResponseCache, RedisResponseCache, build_cache
from .orders import OrderService
from .queries import QueryService

__all__ = ["ResponseCache", "RedisResponseCache", "build_cache", "OrderService", "QueryService"]
