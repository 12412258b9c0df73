import json
import logging
import redis
from typing import Optional, Any

from stock_ledger.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class CacheService:
    """
    Redis cache service for product details.

    Stock-changing operations delete the product entry after they commit,
    so a cached product never outlives the transaction that changed it.
    Redis failures are never fatal: reads fall back to the database.
    """

    def __init__(self, client: redis.Redis = None, ttl: int = None, enabled: bool = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled

    def _make_key(self, prefix: str, key: str) -> str:
        """Create a namespaced cache key."""
        return f"{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            prefix: Cache key prefix (e.g., 'product')
            key: Unique identifier

        Returns:
            Cached value or None if not found
        """
        if not self.enabled:
            return None
        cache_key = self._make_key(prefix, key)
        try:
            value = self.client.get(cache_key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set a value in cache with TTL.

        Args:
            prefix: Cache key prefix
            key: Unique identifier
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds (optional, uses default if not provided)

        Returns:
            True if successful, False otherwise
        """
        if not self.enabled:
            return False
        cache_key = self._make_key(prefix, key)
        ttl = ttl or self.ttl
        try:
            serialized = json.dumps(value, default=str)
            self.client.setex(cache_key, ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")
            return False

    def delete(self, prefix: str, key: str) -> bool:
        """Delete a value from cache. Returns True if the call reached Redis."""
        if not self.enabled:
            return False
        cache_key = self._make_key(prefix, key)
        try:
            self.client.delete(cache_key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {cache_key}: {e}")
            return False

    def ping(self) -> bool:
        return bool(self.client.ping())


# Singleton cache service instance
cache_service = CacheService()
