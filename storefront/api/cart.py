"""Cart API endpoints for the mobile app"""
from fastapi import APIRouter, Depends
from storefront.api.deps import get_cart_service, get_catalog
from storefront.catalog.store import CatalogStore
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemKey,
    CartItemUpdate,
    CartLineItem,
    CartLineRef,
    CartResponse,
    CartState,
    CartSyncRequest,
)
from storefront.services.cart_service import CartService
from typing import List
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def _cart_response(service: CartService) -> CartResponse:
    state = service.state
    return CartResponse(
        cart=state.cart,
        saved_for_later=state.saved_for_later,
        total_items=service.get_total_items(),
        total_price=service.get_total_price(),
    )


def _resolve_lines(refs: List[CartLineRef], catalog: CatalogStore) -> List[CartLineItem]:
    return [
        CartLineItem(
            product=catalog.require(ref.product_id),
            quantity=ref.quantity,
            size=ref.size,
            color=ref.color,
        )
        for ref in refs
    ]


@router.get("", response_model=CartResponse)
async def get_cart(cart: CartService = Depends(get_cart_service)):
    """Cart, saved-for-later list and totals"""
    return _cart_response(cart)


@router.put("", response_model=CartResponse)
async def sync_cart(
    payload: CartSyncRequest,
    cart: CartService = Depends(get_cart_service),
    catalog: CatalogStore = Depends(get_catalog)
):
    """
    Replace the whole cart state (client sync)
    Lines with the same product, size and color are merged
    """
    state = CartState(
        cart=_resolve_lines(payload.cart, catalog),
        saved_for_later=_resolve_lines(payload.saved_for_later, catalog),
    )
    await cart.replace(state)
    return _cart_response(cart)


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    item: CartItemCreate,
    cart: CartService = Depends(get_cart_service),
    catalog: CatalogStore = Depends(get_catalog)
):
    """
    Add product to cart
    If the same product, size and color is already in the cart, quantity is increased
    """
    product = catalog.require(item.product_id)
    await cart.add_to_cart(product, item.size, item.color, item.quantity)
    return _cart_response(cart)


@router.put("/update", response_model=CartResponse)
async def update_quantity(item: CartItemUpdate, cart: CartService = Depends(get_cart_service)):
    """Set line quantity; zero or less removes the line"""
    await cart.update_quantity(item.product_id, item.size, item.color, item.quantity)
    return _cart_response(cart)


@router.delete("/remove", response_model=CartResponse)
async def remove_from_cart(item: CartItemKey, cart: CartService = Depends(get_cart_service)):
    await cart.remove_from_cart(item.product_id, item.size, item.color)
    return _cart_response(cart)


@router.post("/save-for-later", response_model=CartResponse)
async def save_for_later(item: CartItemKey, cart: CartService = Depends(get_cart_service)):
    await cart.save_for_later(item.product_id, item.size, item.color)
    return _cart_response(cart)


@router.post("/move-to-cart", response_model=CartResponse)
async def move_to_cart(item: CartItemKey, cart: CartService = Depends(get_cart_service)):
    await cart.move_to_cart(item.product_id, item.size, item.color)
    return _cart_response(cart)


@router.delete("/remove-saved", response_model=CartResponse)
async def remove_saved_item(item: CartItemKey, cart: CartService = Depends(get_cart_service)):
    await cart.remove_saved_item(item.product_id, item.size, item.color)
    return _cart_response(cart)


@router.delete("/clear", response_model=CartResponse)
async def clear_cart(cart: CartService = Depends(get_cart_service)):
    """Empty the cart. Saved items are kept."""
    await cart.clear_cart()
    logger.info("[CART] Cart cleared via API")
    return _cart_response(cart)
