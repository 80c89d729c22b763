from pydantic import Field, model_validator
from typing import FrozenSet
from enum import Enum
from storefront.schemas.common import CamelModel

# Upper bound of the price slider. A range of exactly [0, PRICE_RANGE_CEILING]
# means "no price filter".
PRICE_RANGE_CEILING = 50000


class SortKey(str, Enum):
    """Catalog sort orders"""
    POPULARITY = "popularity"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"
    NEWEST = "newest"
    DISCOUNT = "discount"


SORT_LABELS = {
    SortKey.POPULARITY: "Popularity",
    SortKey.PRICE_LOW: "Price: Low to High",
    SortKey.PRICE_HIGH: "Price: High to Low",
    SortKey.NEWEST: "Newest First",
    SortKey.RATING: "Customer Rating",
    SortKey.DISCOUNT: "Better Discount",
}

# Preset ranges offered by the filter sheet
PRICE_RANGE_PRESETS = [
    ("Under ₹500", 0, 500),
    ("₹500 - ₹1000", 500, 1000),
    ("₹1000 - ₹2000", 1000, 2000),
    ("₹2000 - ₹5000", 2000, 5000),
    ("Above ₹5000", 5000, PRICE_RANGE_CEILING),
]

RATING_THRESHOLDS = [4, 3, 2, 1]


class PriceRange(CamelModel):
    min: int = Field(0, ge=0)
    max: int = Field(PRICE_RANGE_CEILING, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min > self.max:
            raise ValueError(f"priceRange.min ({self.min}) must not exceed priceRange.max ({self.max})")
        return self

    @property
    def is_constrained(self) -> bool:
        return self.min > 0 or self.max < PRICE_RANGE_CEILING


class FilterCriteria(CamelModel):
    """Structured catalog filters. Replaced wholesale on every change."""
    categories: FrozenSet[str] = frozenset()
    brands: FrozenSet[str] = frozenset()
    price_range: PriceRange = Field(default_factory=PriceRange)
    rating: float = Field(0, ge=0, le=5, description="Minimum rating, 0 = any")

    model_config = {"frozen": True}
