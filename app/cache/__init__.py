from app.cache.base import CacheGateway
from app.cache.database import DatabaseCache
from app.cache.memory import MemoryCache
from app.cache.singleflight import SingleFlight

__all__ = ["CacheGateway", "DatabaseCache", "MemoryCache", "SingleFlight"]
