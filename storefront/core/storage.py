"""
Key-value storage used for carts, recently viewed lists and the token blacklist.

Two interchangeable backends are selected at startup from settings:
an in-process dictionary and Redis. Callers depend only on KeyValueStorage.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import json
import logging
import time
from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError
from storefront.config import settings
from storefront.core.exceptions import NetworkError

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Async string key-value store"""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def delete_item(self, key: str) -> None:
        ...

    async def connect(self) -> None:
        """Open connections, if the backend has any"""

    async def close(self) -> None:
        """Release connections, if the backend has any"""

    @property
    def backend_name(self) -> str:
        return self.__class__.__name__

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.get_item(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        await self.set_item(key, json.dumps(value), ttl=ttl)

    # Token Blacklist Methods

    async def blacklist_token(self, token: str, expiry_seconds: int) -> bool:
        """Add token to blacklist until it would have expired anyway"""
        try:
            await self.set_item(f"blacklist:token:{token}", "1", ttl=max(expiry_seconds, 1))
            return True
        except NetworkError as e:
            logger.error(f"Failed to blacklist token: {e}")
            return False

    async def is_token_blacklisted(self, token: str) -> bool:
        try:
            return await self.get_item(f"blacklist:token:{token}") is not None
        except NetworkError as e:
            logger.error(f"Failed to check token blacklist: {e}")
            return False


class MemoryStorage(KeyValueStorage):
    """Process-local storage; contents are lost on restart"""

    purge_interval = 60.0

    def __init__(self):
        self._items: Dict[str, Tuple[str, Optional[float]]] = {}
        self._next_purge = 0.0

    async def get_item(self, key: str) -> Optional[str]:
        entry = self._items.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._items[key]
            return None
        return value

    async def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        now = time.monotonic()
        self._purge_expired(now)
        expires_at = now + ttl if ttl else None
        self._items[key] = (value, expires_at)

    def _purge_expired(self, now: float) -> None:
        # Entries nobody reads again (revoked tokens) would otherwise stay forever
        if now < self._next_purge:
            return
        self._next_purge = now + self.purge_interval
        expired = [key for key, (_, expires_at) in self._items.items() if expires_at is not None and expires_at <= now]
        for key in expired:
            del self._items[key]

    async def delete_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class RedisStorage(KeyValueStorage):
    """Redis backed storage. Failures surface as NetworkError."""

    def __init__(self, url: str, key_prefix: str = "", max_connections: int = 10):
        self.url = url
        self.key_prefix = key_prefix
        self.max_connections = max_connections
        self._redis: Optional[Redis] = None
        self._pool: Optional[ConnectionPool] = None

    async def connect(self):
        """Initialize Redis connection pool and check it answers"""
        self._pool = ConnectionPool.from_url(
            self.url,
            decode_responses=True,
            max_connections=self.max_connections
        )
        self._redis = Redis(connection_pool=self._pool)
        try:
            await self._redis.ping()
        except (RedisError, OSError) as e:
            self._redis = None
            await self._pool.disconnect()
            self._pool = None
            raise NetworkError(f"Redis connection failed: {e}") from e
        logger.info("Redis connected successfully")

    async def close(self):
        """Close Redis connection"""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
        if self._pool:
            # A pool handed to Redis() is not closed by aclose()
            await self._pool.disconnect()
            self._pool = None
            logger.info("Redis disconnected")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _client(self) -> Redis:
        if self._redis is None:
            raise NetworkError("Redis is not connected")
        return self._redis

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return await self._client().get(self._key(key))
        except (RedisError, OSError) as e:
            logger.error(f"Failed to read {key} from Redis: {e}")
            raise NetworkError("Storage read failed") from e

    async def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self._client().set(self._key(key), value, ex=ttl or None)
        except (RedisError, OSError) as e:
            logger.error(f"Failed to write {key} to Redis: {e}")
            raise NetworkError("Storage write failed") from e

    async def delete_item(self, key: str) -> None:
        try:
            await self._client().delete(self._key(key))
        except (RedisError, OSError) as e:
            logger.error(f"Failed to delete {key} from Redis: {e}")
            raise NetworkError("Storage delete failed") from e


async def create_storage(backend: Optional[str] = None) -> KeyValueStorage:
    """
    Build the storage backend named in settings and connect it.

    An unreachable Redis falls back to memory storage so the API still starts.
    """
    backend = backend or settings.STORAGE_BACKEND
    if backend == "redis":
        storage = RedisStorage(settings.REDIS_URL, key_prefix=settings.STORAGE_KEY_PREFIX)
        try:
            await storage.connect()
            return storage
        except NetworkError as e:
            logger.error(f"{e}")
            logger.warning("Running without Redis - carts and sessions are kept in memory")
    return MemoryStorage()
