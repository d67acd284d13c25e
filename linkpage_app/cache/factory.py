"""
Factory for creating cache instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from linkpage_app.config import settings

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Simple factory for creating cache instances.

    Creates the instance once and reuses it. Configuration comes from
    settings, not from parameters.
    """

    _instance: CacheStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: CacheBackend) -> CacheStrategy:
        """
        Create or return cached cache instance.

        Args:
            backend: Type of cache backend (from enum)

        Returns:
            Singleton cache instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == CacheBackend.REDIS:
            import redis
            import redis.asyncio as aioredis

            options = dict(
                decode_responses=False,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            try:
                # Test connection immediately
                ping_client = redis.from_url(settings.redis_url, **options)
                ping_client.ping()
                ping_client.close()

                cls._instance = RedisCache(aioredis.from_url(settings.redis_url, **options))
                logger.info("✅ Redis cache initialized")

            except Exception as e:
                logger.warning(f"⚠️  Redis connection failed: {e}")
                logger.warning("⚠️  Falling back to in-memory cache")
                cls._instance = InMemoryCache()

        elif backend == CacheBackend.MEMORY:
            cls._instance = InMemoryCache()
            logger.info("✅ In-memory cache initialized")

        elif backend == CacheBackend.NULL:
            cls._instance = NullCache()
            logger.info("✅ Null cache initialized")

        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
