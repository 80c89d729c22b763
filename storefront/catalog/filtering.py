"""
Catalog filter engine.

Pure functions over an in-memory product sequence. Search text and every
structured predicate combine with AND; each predicate is skipped when its
criterion is unset.
"""
from typing import Iterable, List
from storefront.schemas.filters import FilterCriteria
from storefront.schemas.product import Product


def matches_search(product: Product, query: str) -> bool:
    """Case-insensitive substring match on the searchable text fields"""
    query = query.strip().lower()
    if not query:
        return True
    fields = [product.name, product.brand, product.category, product.subcategory, product.description]
    return any(query in field.lower() for field in fields if field)


def matches_criteria(product: Product, criteria: FilterCriteria) -> bool:
    if criteria.categories and product.category not in criteria.categories:
        return False
    if criteria.brands and product.brand not in criteria.brands:
        return False
    price_range = criteria.price_range
    if price_range.is_constrained and not (price_range.min <= product.price <= price_range.max):
        return False
    if criteria.rating > 0 and product.rating < criteria.rating:
        return False
    return True


def filter_products(
    catalog: Iterable[Product],
    criteria: FilterCriteria,
    search_text: str = ""
) -> List[Product]:
    """Return the products that pass the search text and every active filter"""
    return [
        product for product in catalog
        if matches_search(product, search_text) and matches_criteria(product, criteria)
    ]


def count_active_filters(criteria: FilterCriteria) -> int:
    """Number of structured filters currently narrowing the catalog"""
    count = 0
    if criteria.categories:
        count += 1
    if criteria.brands:
        count += 1
    if criteria.price_range.is_constrained:
        count += 1
    if criteria.rating > 0:
        count += 1
    return count
