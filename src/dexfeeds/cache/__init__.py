"""Cache collaborator implementations (in-memory and SQL-backed)."""

from dexfeeds.cache.base import Cache, CachedValue
from dexfeeds.cache.memory import InMemoryCache
from dexfeeds.cache.sql import SQLCache

__all__ = ["Cache", "CachedValue", "InMemoryCache", "SQLCache"]
