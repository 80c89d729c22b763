from storefront.models.user import User
from storefront.models.product import Product

__all__ = [
    "User",
    "Product",
]
