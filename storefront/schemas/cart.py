"""Cart schemas"""
from pydantic import Field
from typing import List, NamedTuple
from storefront.schemas.common import CamelModel
from storefront.schemas.product import Product


class CartKey(NamedTuple):
    """Composite identity of a cart line"""
    product_id: str
    size: str
    color: str


class CartLineItem(CamelModel):
    product: Product
    quantity: int = Field(..., ge=1)
    size: str
    color: str

    model_config = {"frozen": True}

    @property
    def key(self) -> CartKey:
        return CartKey(self.product.id, self.size, self.color)


class CartState(CamelModel):
    """Cart and saved-for-later lists. A key appears at most once per list."""
    cart: List[CartLineItem] = Field(default_factory=list)
    saved_for_later: List[CartLineItem] = Field(default_factory=list)


# Request bodies

class CartItemKey(CamelModel):
    product_id: str = Field(..., min_length=1)
    size: str
    color: str


class CartItemCreate(CartItemKey):
    quantity: int = 1


class CartItemUpdate(CartItemKey):
    quantity: int  # <= 0 removes the line


class CartLineRef(CartItemKey):
    quantity: int = Field(..., ge=1)


class CartSyncRequest(CamelModel):
    """Full cart state by product reference, sent by clients after each change"""
    cart: List[CartLineRef] = Field(default_factory=list)
    saved_for_later: List[CartLineRef] = Field(default_factory=list)


class CartResponse(CamelModel):
    cart: List[CartLineItem] = []
    saved_for_later: List[CartLineItem] = []
    total_items: int = 0
    total_price: int = 0
