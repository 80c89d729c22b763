from storefront.schemas.product import (
    Product,
    ProductList,
    CatalogFacets,
)
from storefront.schemas.filters import (
    FilterCriteria,
    PriceRange,
    SortKey,
)
from storefront.schemas.cart import (
    CartKey,
    CartLineItem,
    CartState,
    CartResponse,
)
from storefront.schemas.user import (
    UserCreate,
    UserResponse,
)
from storefront.schemas.auth import (
    LoginRequest,
    Token,
    AuthResponse,
)

__all__ = [
    "Product",
    "ProductList",
    "CatalogFacets",
    "FilterCriteria",
    "PriceRange",
    "SortKey",
    "CartKey",
    "CartLineItem",
    "CartState",
    "CartResponse",
    "UserCreate",
    "UserResponse",
    "LoginRequest",
    "Token",
    "AuthResponse",
]
