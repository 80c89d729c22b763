"""Recently viewed products per user, most recent first"""
from contextlib import asynccontextmanager
from typing import Dict, List
import asyncio
import logging
from storefront.catalog.store import CatalogStore
from storefront.config import settings
from storefront.core.storage import KeyValueStorage
from storefront.schemas.product import Product

logger = logging.getLogger(__name__)


class RecentlyViewedService:

    def __init__(self, storage: KeyValueStorage, catalog: CatalogStore, limit: int = settings.RECENTLY_VIEWED_LIMIT):
        self.storage = storage
        self.catalog = catalog
        self.limit = limit
        self._locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Dict[int, int] = {}

    @staticmethod
    def storage_key(user_id: int) -> str:
        return f"recently_viewed:{user_id}"

    @asynccontextmanager
    async def _lock(self, user_id: int):
        """Serialize read-modify-write per user; the lock is dropped once nobody holds or awaits it"""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    async def _ids(self, user_id: int) -> List[str]:
        return await self.storage.get_json(self.storage_key(user_id)) or []

    async def record(self, user_id: int, product_id: str) -> List[str]:
        """Move the product to the front of the list, dropping the oldest past the limit"""
        self.catalog.require(product_id)
        async with self._lock(user_id):
            ids = [product_id] + [pid for pid in await self._ids(user_id) if pid != product_id]
            ids = ids[:self.limit]
            await self.storage.set_json(self.storage_key(user_id), ids)
        logger.info(f"[CATALOG] user={user_id} viewed product={product_id}")
        return ids

    async def list(self, user_id: int) -> List[Product]:
        # Ids no longer in the catalog are skipped
        products = []
        for product_id in await self._ids(user_id):
            product = self.catalog.get(product_id)
            if product is not None:
                products.append(product)
        return products

    async def clear(self, user_id: int) -> None:
        async with self._lock(user_id):
            await self.storage.delete_item(self.storage_key(user_id))
