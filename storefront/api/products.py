from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError as PydanticValidationError
from storefront.api.deps import get_catalog, get_current_user, get_recently_viewed
from storefront.catalog.filtering import count_active_filters, filter_products
from storefront.catalog.sorting import resolve_sort_key, sort_products
from storefront.catalog.store import CatalogStore
from storefront.data.products import CATEGORIES
from storefront.models.user import User
from storefront.schemas.common import MessageResponse
from storefront.schemas.filters import (
    FilterCriteria,
    PriceRange,
    PRICE_RANGE_CEILING,
    PRICE_RANGE_PRESETS,
    RATING_THRESHOLDS,
    SORT_LABELS,
)
from storefront.schemas.product import (
    CatalogFacets,
    PriceRangeOption,
    Product,
    ProductList,
    SortOptionResponse,
)
from storefront.services.recently_viewed_service import RecentlyViewedService
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ProductList)
async def list_products(
    q: str = "",
    categories: Optional[List[str]] = Query(None),
    brands: Optional[List[str]] = Query(None),
    min_price: int = Query(0, ge=0),
    max_price: int = Query(PRICE_RANGE_CEILING, ge=0),
    rating: float = Query(0, ge=0, le=5),
    sort: str = "popularity",
    catalog: CatalogStore = Depends(get_catalog)
):
    """
    Search, filter and sort the catalog.
    Unknown sort values fall back to popularity.
    """
    try:
        criteria = FilterCriteria(
            categories=frozenset(categories or []),
            brands=frozenset(brands or []),
            price_range=PriceRange(min=min_price, max=max_price),
            rating=rating,
        )
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
        )

    sort_key = resolve_sort_key(sort)
    products = sort_products(filter_products(catalog, criteria, q), sort_key)
    return ProductList(
        products=products,
        total=len(products),
        active_filters=count_active_filters(criteria),
        sort=sort_key.value,
    )


@router.get("/facets", response_model=CatalogFacets)
async def get_facets(catalog: CatalogStore = Depends(get_catalog)):
    """Options offered by the filter and sort sheets"""
    return CatalogFacets(
        categories=CATEGORIES,
        brands=catalog.brands(),
        price_ranges=[
            PriceRangeOption(label=label, min=low, max=high)
            for label, low, high in PRICE_RANGE_PRESETS
        ],
        ratings=RATING_THRESHOLDS,
        sort_options=[
            SortOptionResponse(label=label, value=key.value)
            for key, label in SORT_LABELS.items()
        ],
    )


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, catalog: CatalogStore = Depends(get_catalog)):
    return catalog.require(product_id)


@router.post("/{product_id}/view", response_model=MessageResponse)
async def record_view(
    product_id: str,
    current_user: User = Depends(get_current_user),
    recently_viewed: RecentlyViewedService = Depends(get_recently_viewed)
):
    """Add the product to the user's recently viewed list"""
    await recently_viewed.record(current_user.id, product_id)
    return MessageResponse(message="View recorded")
