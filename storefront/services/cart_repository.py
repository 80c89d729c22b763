"""Cart persistence collaborators: load once at session start, save after every change"""
from abc import ABC, abstractmethod
import logging
from storefront.core.storage import KeyValueStorage
from storefront.schemas.cart import CartState

logger = logging.getLogger(__name__)


class CartRepository(ABC):

    @abstractmethod
    async def load(self) -> CartState:
        """Return the persisted cart state (empty if nothing was stored)"""

    @abstractmethod
    async def save(self, state: CartState) -> None:
        """Persist the whole cart state. Raises NetworkError on failure."""


class StorageCartRepository(CartRepository):
    """Keeps the cart as one JSON record in key-value storage"""

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key

    async def load(self) -> CartState:
        data = await self.storage.get_json(self.key)
        if data is None:
            return CartState()
        return CartState.model_validate(data)

    async def save(self, state: CartState) -> None:
        await self.storage.set_json(self.key, state.to_record())
        logger.debug(f"[CART] Saved {self.key}: {len(state.cart)} cart / {len(state.saved_for_later)} saved lines")
