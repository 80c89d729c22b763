"""
Cart reconciler: cart and saved-for-later lists keyed by (productId, size, color).

Mutations run one at a time per cart. Each effective change is applied to a
working copy, persisted through the repository, and only then kept. Readers
never see an unsaved copy. If the save fails or is cancelled the copy is
dropped; failures are raised as NetworkError.
Operations on a key that is not present are no-ops and report False.
"""
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple, TypeVar
import asyncio
import logging
from storefront.catalog.store import CatalogStore
from storefront.config import settings
from storefront.core.exceptions import NetworkError, ValidationError
from storefront.core.storage import KeyValueStorage
from storefront.schemas.cart import CartKey, CartLineItem, CartState
from storefront.schemas.product import Product
from storefront.services.cart_repository import CartRepository, StorageCartRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _copy_state(state: CartState) -> CartState:
    # Line items are frozen, so copying the lists is enough
    return CartState(cart=list(state.cart), saved_for_later=list(state.saved_for_later))


def _index_of(lines: List[CartLineItem], key: CartKey) -> Optional[int]:
    for index, line in enumerate(lines):
        if line.key == key:
            return index
    return None


def _merge_line(lines: List[CartLineItem], line: CartLineItem) -> CartLineItem:
    """Append the line, or add its quantity to the line already holding its key"""
    index = _index_of(lines, line.key)
    if index is None:
        lines.append(line)
        return line
    merged = lines[index].model_copy(update={"quantity": lines[index].quantity + line.quantity})
    lines[index] = merged
    return merged


def _merged(lines: List[CartLineItem]) -> List[CartLineItem]:
    result: List[CartLineItem] = []
    for line in lines:
        _merge_line(result, line)
    return result


def normalize_state(state: CartState) -> CartState:
    """
    Collapse duplicate keys by summing quantities. A key found in both lists
    ends up in the cart.
    """
    cart = _merged(state.cart)
    saved: List[CartLineItem] = []
    for line in _merged(state.saved_for_later):
        if _index_of(cart, line.key) is None:
            saved.append(line)
        else:
            _merge_line(cart, line)
    return CartState(cart=cart, saved_for_later=saved)


class CartService:
    """Cart reconciler for one shopper"""

    def __init__(self, repository: CartRepository):
        self._repository = repository
        self._state = CartState()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CartState:
        return _copy_state(self._state)

    @property
    def cart_items(self) -> List[CartLineItem]:
        return list(self._state.cart)

    @property
    def saved_items(self) -> List[CartLineItem]:
        return list(self._state.saved_for_later)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def get_total_price(self) -> int:
        return sum(line.product.price * line.quantity for line in self._state.cart)

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self._state.cart)

    async def load(self, catalog: Optional[CatalogStore] = None) -> CartState:
        """
        Read the persisted state. When a catalog is given, stored product
        snapshots are replaced with the catalog's current records.
        """
        async with self._lock:
            state = normalize_state(await self._repository.load())
            if catalog is not None:
                state = CartState(
                    cart=[self._rebind(line, catalog) for line in state.cart],
                    saved_for_later=[self._rebind(line, catalog) for line in state.saved_for_later],
                )
            self._state = state
        logger.info(f"[CART] Loaded cart: {len(state.cart)} items, {len(state.saved_for_later)} saved")
        return self.state

    @staticmethod
    def _rebind(line: CartLineItem, catalog: CatalogStore) -> CartLineItem:
        current = catalog.get(line.product.id)
        if current is None:
            return line
        return line.model_copy(update={"product": current})

    def reset(self) -> None:
        """Forget the in-memory state without touching storage (logout)"""
        self._state = CartState()

    async def _apply(self, change: Callable[[CartState], Tuple[bool, T]]) -> T:
        async with self._lock:
            working = _copy_state(self._state)
            changed, result = change(working)
            if not changed:
                return result

            try:
                await self._repository.save(working)
            except Exception as e:
                logger.error(f"[CART] Failed to persist cart, changes discarded: {e}", exc_info=True)
                if isinstance(e, NetworkError):
                    raise
                raise NetworkError("Failed to save cart") from e
            self._state = working
            return result

    async def add_to_cart(self, product: Product, size: str, color: str, quantity: int = 1) -> CartLineItem:
        """Add a product variant, merging with an existing line of the same key"""
        if not size or not color:
            raise ValidationError("Please select size and color")
        if quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", {"quantity": quantity})
        if product.sizes and size not in product.sizes:
            raise ValidationError(f"Size {size!r} is not available for this product", {"sizes": product.sizes})
        if product.colors and color not in product.colors:
            raise ValidationError(f"Color {color!r} is not available for this product", {"colors": product.colors})

        new_line = CartLineItem(product=product, quantity=quantity, size=size, color=color)

        def change(state: CartState):
            # A key lives in one list only; a saved line joins the cart first
            saved = _index_of(state.saved_for_later, new_line.key)
            if saved is not None:
                _merge_line(state.cart, state.saved_for_later.pop(saved))
            return True, _merge_line(state.cart, new_line)

        line = await self._apply(change)
        logger.info(f"[CART] Added product={product.id} size={size} color={color} qty={quantity}, line qty={line.quantity}")
        return line

    async def update_quantity(self, product_id: str, size: str, color: str, quantity: int) -> Optional[CartLineItem]:
        """Set a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            await self.remove_from_cart(product_id, size, color)
            return None

        key = CartKey(product_id, size, color)

        def change(state: CartState):
            index = _index_of(state.cart, key)
            if index is None:
                return False, None
            state.cart[index] = state.cart[index].model_copy(update={"quantity": quantity})
            return True, state.cart[index]

        line = await self._apply(change)
        if line is None:
            logger.info(f"[CART] Update skipped, {key} not in cart")
        return line

    async def remove_from_cart(self, product_id: str, size: str, color: str) -> bool:
        key = CartKey(product_id, size, color)

        def change(state: CartState):
            index = _index_of(state.cart, key)
            if index is None:
                return False, False
            del state.cart[index]
            return True, True

        return await self._apply(change)

    async def save_for_later(self, product_id: str, size: str, color: str) -> bool:
        """Move a line from the cart to saved-for-later, keeping its quantity"""
        key = CartKey(product_id, size, color)

        def change(state: CartState):
            index = _index_of(state.cart, key)
            if index is None:
                return False, False
            _merge_line(state.saved_for_later, state.cart.pop(index))
            return True, True

        return await self._apply(change)

    async def move_to_cart(self, product_id: str, size: str, color: str) -> bool:
        """Move a saved line back to the cart, merging with a cart line of the same key"""
        key = CartKey(product_id, size, color)

        def change(state: CartState):
            index = _index_of(state.saved_for_later, key)
            if index is None:
                return False, False
            _merge_line(state.cart, state.saved_for_later.pop(index))
            return True, True

        return await self._apply(change)

    async def remove_saved_item(self, product_id: str, size: str, color: str) -> bool:
        key = CartKey(product_id, size, color)

        def change(state: CartState):
            index = _index_of(state.saved_for_later, key)
            if index is None:
                return False, False
            del state.saved_for_later[index]
            return True, True

        return await self._apply(change)

    async def clear_cart(self) -> bool:
        """Empty the cart; saved-for-later is left alone"""
        def change(state: CartState):
            if not state.cart:
                return False, False
            state.cart.clear()
            return True, True

        return await self._apply(change)

    async def replace(self, state: CartState) -> CartState:
        """Install a whole new state (client sync), merging duplicate keys"""
        normalized = normalize_state(state)

        def change(current: CartState):
            current.cart[:] = normalized.cart
            current.saved_for_later[:] = normalized.saved_for_later
            return True, None

        await self._apply(change)
        return self.state


class CartRegistry:
    """
    One cart reconciler per user, loaded from storage on first use.

    At most max_carts reconcilers are kept; the least recently used idle one
    is dropped first. Every change is already persisted, so a dropped cart
    reloads unchanged.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        catalog: Optional[CatalogStore] = None,
        max_carts: int = settings.CART_CACHE_SIZE,
    ):
        self._storage = storage
        self._catalog = catalog
        self.max_carts = max(max_carts, 1)
        self._carts: "OrderedDict[int, CartService]" = OrderedDict()
        self._lock = asyncio.Lock()

    @staticmethod
    def storage_key(user_id: int) -> str:
        return f"cart:{user_id}"

    def __len__(self) -> int:
        return len(self._carts)

    async def get(self, user_id: int) -> CartService:
        async with self._lock:
            service = self._carts.get(user_id)
            if service is not None:
                self._carts.move_to_end(user_id)
                return service
            service = CartService(StorageCartRepository(self._storage, self.storage_key(user_id)))
            await service.load(self._catalog)
            self._carts[user_id] = service
            self._evict()
            return service

    def _evict(self) -> None:
        for user_id in list(self._carts)[:-1]:
            if len(self._carts) <= self.max_carts:
                return
            # Carts in the middle of a change stay until it finishes
            if self._carts[user_id].busy:
                continue
            del self._carts[user_id]
            logger.debug(f"[CART] Evicted idle cart for user={user_id}")

    def discard(self, user_id: int) -> None:
        self._carts.pop(user_id, None)
