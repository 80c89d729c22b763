"""Catalog sort engine. Every ordering is stable, so ties keep catalog order."""
from typing import Callable, Dict, Iterable, List, Union
import logging
from storefront.schemas.filters import SortKey
from storefront.schemas.product import Product

logger = logging.getLogger(__name__)

# Key functions are written so that an ascending sort gives the wanted order
_SORT_KEYS: Dict[SortKey, Callable[[Product], object]] = {
    SortKey.PRICE_LOW: lambda p: p.price,
    SortKey.PRICE_HIGH: lambda p: -p.price,
    SortKey.RATING: lambda p: -p.rating,
    SortKey.NEWEST: lambda p: 0 if p.is_new else 1,
    SortKey.DISCOUNT: lambda p: -p.effective_discount,
    SortKey.POPULARITY: lambda p: -p.review_count,
}


def resolve_sort_key(value: Union[str, SortKey, None]) -> SortKey:
    """Map a raw sort value to a SortKey; unknown values fall back to popularity"""
    if isinstance(value, SortKey):
        return value
    try:
        return SortKey(value)
    except ValueError:
        logger.debug(f"[CATALOG] Unknown sort key {value!r}, using popularity")
        return SortKey.POPULARITY


def sort_products(products: Iterable[Product], key: Union[str, SortKey, None] = SortKey.POPULARITY) -> List[Product]:
    """Return a new list ordered by the given sort key"""
    sort_key = resolve_sort_key(key)
    return sorted(products, key=_SORT_KEYS[sort_key])
