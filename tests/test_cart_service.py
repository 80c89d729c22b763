"""
Tests for the cart reconciler
"""
import asyncio
import pytest
from unittest.mock import AsyncMock

from storefront.core.exceptions import NetworkError, ValidationError
from storefront.core.storage import MemoryStorage
from storefront.schemas.cart import CartLineItem, CartState
from storefront.services.cart_repository import CartRepository, StorageCartRepository
from storefront.services.cart_service import CartRegistry, CartService


class FlakyRepository(CartRepository):
    """Repository whose saves can be switched to fail"""

    def __init__(self):
        self.saved = []
        self.fail = False

    async def load(self) -> CartState:
        return CartState()

    async def save(self, state: CartState) -> None:
        if self.fail:
            raise NetworkError("offline")
        self.saved.append(state)


def keys(lines):
    return [(line.product.id, line.size, line.color, line.quantity) for line in lines]


@pytest.fixture
def repository():
    return FlakyRepository()


@pytest.fixture
def cart(repository):
    return CartService(repository)


class TestAddToCart:

    @pytest.mark.asyncio
    async def test_add_same_key_merges_quantities(self, cart, product_by_id):
        shirt = product_by_id("1")
        await cart.add_to_cart(shirt, "M", "Blue", 2)
        line = await cart.add_to_cart(shirt, "M", "Blue", 3)

        assert line.quantity == 5
        assert keys(cart.cart_items) == [("1", "M", "Blue", 5)]

    @pytest.mark.asyncio
    async def test_different_variant_is_separate_line(self, cart, product_by_id):
        shirt = product_by_id("1")
        await cart.add_to_cart(shirt, "M", "Blue")
        await cart.add_to_cart(shirt, "L", "Blue")

        assert keys(cart.cart_items) == [("1", "M", "Blue", 1), ("1", "L", "Blue", 1)]

    @pytest.mark.asyncio
    async def test_missing_selection_rejected(self, cart, repository, product_by_id):
        with pytest.raises(ValidationError):
            await cart.add_to_cart(product_by_id("1"), "", "Blue")
        with pytest.raises(ValidationError):
            await cart.add_to_cart(product_by_id("1"), "M", "")
        assert repository.saved == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_non_positive_quantity_rejected(self, cart, product_by_id, quantity):
        with pytest.raises(ValidationError):
            await cart.add_to_cart(product_by_id("1"), "M", "Blue", quantity)
        assert cart.cart_items == []

    @pytest.mark.asyncio
    async def test_unavailable_variant_rejected(self, cart, product_by_id):
        with pytest.raises(ValidationError):
            await cart.add_to_cart(product_by_id("1"), "XXL", "Blue")
        with pytest.raises(ValidationError):
            await cart.add_to_cart(product_by_id("1"), "M", "Purple")

    @pytest.mark.asyncio
    async def test_each_add_persists_whole_state(self, cart, repository, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        await cart.add_to_cart(product_by_id("2"), "S", "Solid Blue")

        assert len(repository.saved) == 2
        assert keys(repository.saved[-1].cart) == [("1", "M", "Blue", 2), ("2", "S", "Solid Blue", 1)]


class TestUpdateAndRemove:

    @pytest.mark.asyncio
    async def test_update_replaces_quantity(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        line = await cart.update_quantity("1", "M", "Blue", 7)

        assert line.quantity == 7
        assert cart.get_total_items() == 7

    @pytest.mark.asyncio
    async def test_update_to_zero_removes_line(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        assert await cart.update_quantity("1", "M", "Blue", 0) is None
        assert cart.cart_items == []

    @pytest.mark.asyncio
    async def test_update_absent_key_is_noop(self, cart, repository):
        assert await cart.update_quantity("1", "M", "Blue", 3) is None
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_remove_absent_key_returns_false_without_saving(self, cart, repository, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        saves = len(repository.saved)

        assert await cart.remove_from_cart("1", "L", "Blue") is False
        assert len(repository.saved) == saves

    @pytest.mark.asyncio
    async def test_remove_existing_line(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        assert await cart.remove_from_cart("1", "M", "Blue") is True
        assert cart.cart_items == []

    @pytest.mark.asyncio
    async def test_clear_cart_keeps_saved_items(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        await cart.add_to_cart(product_by_id("2"), "S", "Floral Print")
        await cart.save_for_later("2", "S", "Floral Print")

        assert await cart.clear_cart() is True
        assert cart.cart_items == []
        assert keys(cart.saved_items) == [("2", "S", "Floral Print", 1)]
        assert await cart.clear_cart() is False


class TestSaveForLater:

    @pytest.mark.asyncio
    async def test_save_then_move_restores_cart(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 3)

        assert await cart.save_for_later("1", "M", "Blue") is True
        assert cart.cart_items == []
        assert keys(cart.saved_items) == [("1", "M", "Blue", 3)]

        assert await cart.move_to_cart("1", "M", "Blue") is True
        assert keys(cart.cart_items) == [("1", "M", "Blue", 3)]
        assert cart.saved_items == []

    @pytest.mark.asyncio
    async def test_add_of_saved_variant_pulls_it_into_cart(self, cart, repository, product_by_id):
        shirt = product_by_id("1")
        await cart.add_to_cart(shirt, "M", "Blue", 2)
        await cart.save_for_later("1", "M", "Blue")

        line = await cart.add_to_cart(shirt, "M", "Blue", 1)

        assert line.quantity == 3
        assert keys(cart.cart_items) == [("1", "M", "Blue", 3)]
        assert cart.saved_items == []
        assert repository.saved[-1].saved_for_later == []
        assert await cart.move_to_cart("1", "M", "Blue") is False

    @pytest.mark.asyncio
    async def test_key_is_never_in_both_lists(self, cart, product_by_id):
        shirt = product_by_id("1")
        await cart.add_to_cart(shirt, "M", "Blue", 2)
        await cart.save_for_later("1", "M", "Blue")
        await cart.add_to_cart(shirt, "M", "Blue", 4)
        await cart.save_for_later("1", "M", "Blue")

        assert cart.cart_items == []
        assert keys(cart.saved_items) == [("1", "M", "Blue", 6)]

    @pytest.mark.asyncio
    async def test_moves_of_absent_keys_are_noops(self, cart, repository):
        assert await cart.save_for_later("1", "M", "Blue") is False
        assert await cart.move_to_cart("1", "M", "Blue") is False
        assert await cart.remove_saved_item("1", "M", "Blue") is False
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_remove_saved_item(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        await cart.save_for_later("1", "M", "Blue")

        assert await cart.remove_saved_item("1", "M", "Blue") is True
        assert cart.saved_items == []


class TestTotals:

    @pytest.mark.asyncio
    async def test_total_price_and_items(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        await cart.add_to_cart(product_by_id("2"), "S", "Floral Print", 1)

        assert cart.get_total_price() == 1299 * 2 + 2199
        assert cart.get_total_price() == 4797
        assert cart.get_total_items() == 3

    @pytest.mark.asyncio
    async def test_saved_items_are_not_counted(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        await cart.save_for_later("1", "M", "Blue")

        assert cart.get_total_price() == 0
        assert cart.get_total_items() == 0


class TestPersistenceFailure:

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_state_and_raises(self, cart, repository, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        repository.fail = True

        with pytest.raises(NetworkError):
            await cart.add_to_cart(product_by_id("1"), "M", "Blue", 3)
        with pytest.raises(NetworkError):
            await cart.save_for_later("1", "M", "Blue")

        assert keys(cart.cart_items) == [("1", "M", "Blue", 2)]
        assert cart.saved_items == []

    @pytest.mark.asyncio
    async def test_readers_do_not_see_unsaved_change(self, product_by_id):
        started, release = asyncio.Event(), asyncio.Event()

        class BlockingRepository(FlakyRepository):
            async def save(self, state):
                started.set()
                await release.wait()
                await super().save(state)

        repository = BlockingRepository()
        cart = CartService(repository)
        task = asyncio.create_task(cart.add_to_cart(product_by_id("1"), "M", "Blue", 2))
        await started.wait()

        assert cart.get_total_items() == 0
        assert cart.state.cart == []

        release.set()
        await task
        assert cart.get_total_items() == 2
        assert len(repository.saved) == 1

    @pytest.mark.asyncio
    async def test_cancelled_save_leaves_state_unchanged(self, product_by_id):
        started = asyncio.Event()

        class HangingRepository(FlakyRepository):
            hang = True

            async def save(self, state):
                if self.hang:
                    started.set()
                    await asyncio.sleep(3600)
                await super().save(state)

        repository = HangingRepository()
        cart = CartService(repository)
        task = asyncio.create_task(cart.add_to_cart(product_by_id("1"), "M", "Blue", 2))
        await started.wait()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert cart.get_total_items() == 0
        assert cart.get_total_price() == 0
        assert repository.saved == []

        # The lock was released, so later changes still go through
        repository.hang = False
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 1)
        assert keys(cart.cart_items) == [("1", "M", "Blue", 1)]

    @pytest.mark.asyncio
    async def test_unexpected_repository_error_becomes_network_error(self, product_by_id):
        repository = AsyncMock(spec=CartRepository)
        repository.save.side_effect = RuntimeError("disk full")
        cart = CartService(repository)

        with pytest.raises(NetworkError):
            await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        assert cart.cart_items == []


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_interleaved_adds_do_not_lose_updates(self, product_by_id):
        class SlowRepository(FlakyRepository):
            async def save(self, state):
                await asyncio.sleep(0)
                await super().save(state)

        cart = CartService(SlowRepository())
        shirt = product_by_id("1")

        await asyncio.gather(*(cart.add_to_cart(shirt, "M", "Blue", 1) for _ in range(10)))

        assert keys(cart.cart_items) == [("1", "M", "Blue", 10)]

    @pytest.mark.asyncio
    async def test_no_duplicate_keys_after_mixed_operations(self, cart, product_by_id):
        shirt, dress = product_by_id("1"), product_by_id("2")
        await cart.add_to_cart(shirt, "M", "Blue")
        await cart.add_to_cart(dress, "S", "Floral Print", 2)
        await cart.save_for_later("1", "M", "Blue")
        await cart.add_to_cart(shirt, "M", "Blue", 2)
        await cart.move_to_cart("1", "M", "Blue")
        await cart.update_quantity("2", "S", "Floral Print", 5)
        await cart.add_to_cart(dress, "S", "Floral Print")

        cart_keys = [line.key for line in cart.cart_items]
        assert len(cart_keys) == len(set(cart_keys))
        assert keys(cart.cart_items) == [("2", "S", "Floral Print", 6), ("1", "M", "Blue", 3)]


class TestLoadReplaceReset:

    @pytest.mark.asyncio
    async def test_state_survives_reload_through_storage(self, product_by_id, catalog):
        storage = MemoryStorage()
        cart = CartService(StorageCartRepository(storage, "cart:1"))
        await cart.add_to_cart(product_by_id("1"), "M", "Blue", 2)
        await cart.add_to_cart(product_by_id("5"), "One Size", "Beige")
        await cart.save_for_later("5", "One Size", "Beige")

        reloaded = CartService(StorageCartRepository(storage, "cart:1"))
        state = await reloaded.load(catalog)

        assert keys(state.cart) == [("1", "M", "Blue", 2)]
        assert keys(state.saved_for_later) == [("5", "One Size", "Beige", 1)]
        assert reloaded.get_total_price() == 2598

    @pytest.mark.asyncio
    async def test_replace_merges_duplicate_keys(self, cart, repository, product_by_id):
        shirt = product_by_id("1")
        state = CartState(cart=[
            CartLineItem(product=shirt, quantity=1, size="M", color="Blue"),
            CartLineItem(product=shirt, quantity=2, size="M", color="Blue"),
        ])

        result = await cart.replace(state)

        assert keys(result.cart) == [("1", "M", "Blue", 3)]
        assert keys(repository.saved[-1].cart) == [("1", "M", "Blue", 3)]

    @pytest.mark.asyncio
    async def test_replace_folds_saved_duplicate_into_cart(self, cart, product_by_id):
        shirt, dress = product_by_id("1"), product_by_id("2")
        state = CartState(
            cart=[CartLineItem(product=shirt, quantity=1, size="M", color="Blue")],
            saved_for_later=[
                CartLineItem(product=shirt, quantity=2, size="M", color="Blue"),
                CartLineItem(product=dress, quantity=1, size="S", color="Floral Print"),
            ],
        )

        result = await cart.replace(state)

        assert keys(result.cart) == [("1", "M", "Blue", 3)]
        assert keys(result.saved_for_later) == [("2", "S", "Floral Print", 1)]

    @pytest.mark.asyncio
    async def test_reset_clears_memory_only(self, cart, repository, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        saves = len(repository.saved)

        cart.reset()

        assert cart.cart_items == []
        assert len(repository.saved) == saves

    @pytest.mark.asyncio
    async def test_state_is_a_copy(self, cart, product_by_id):
        await cart.add_to_cart(product_by_id("1"), "M", "Blue")
        cart.state.cart.clear()
        assert len(cart.cart_items) == 1


class TestCartRegistry:

    @pytest.mark.asyncio
    async def test_one_cart_per_user(self, catalog):
        registry = CartRegistry(MemoryStorage(), catalog)
        first = await registry.get(1)

        assert await registry.get(1) is first
        assert await registry.get(2) is not first

    @pytest.mark.asyncio
    async def test_discarded_cart_reloads_from_storage(self, catalog):
        registry = CartRegistry(MemoryStorage(), catalog)
        cart = await registry.get(1)
        await cart.add_to_cart(catalog.require("6"), "9", "Red", 2)

        registry.discard(1)
        reloaded = await registry.get(1)

        assert reloaded is not cart
        assert keys(reloaded.cart_items) == [("6", "9", "Red", 2)]

    @pytest.mark.asyncio
    async def test_least_recently_used_cart_is_evicted(self, catalog):
        storage = MemoryStorage()
        registry = CartRegistry(storage, catalog, max_carts=2)
        first = await registry.get(1)
        await first.add_to_cart(catalog.require("1"), "M", "Blue", 2)
        second = await registry.get(2)

        # Touch user 1 so user 2 becomes the oldest
        assert await registry.get(1) is first
        await registry.get(3)

        assert len(registry) == 2
        assert await registry.get(1) is first
        reloaded = await registry.get(2)
        assert reloaded is not second

    @pytest.mark.asyncio
    async def test_evicted_cart_reloads_persisted_lines(self, catalog):
        registry = CartRegistry(MemoryStorage(), catalog, max_carts=1)
        cart = await registry.get(1)
        await cart.add_to_cart(catalog.require("6"), "9", "Red", 2)

        await registry.get(2)
        reloaded = await registry.get(1)

        assert reloaded is not cart
        assert keys(reloaded.cart_items) == [("6", "9", "Red", 2)]

    @pytest.mark.asyncio
    async def test_cart_with_change_in_flight_is_not_evicted(self, catalog):
        registry = CartRegistry(MemoryStorage(), catalog, max_carts=1)
        busy = await registry.get(1)

        async with busy._lock:
            await registry.get(2)
            assert len(registry) == 2

        assert await registry.get(1) is busy
