from pydantic import Field
from typing import Optional, List
from storefront.schemas.common import CamelModel


class Product(CamelModel):
    """
    Catalog product as seen by the filter, sort and cart layers.

    Optional commercial flags have explicit defaults: an absent discount
    counts as 0 and absent isNew / isBestseller count as False.
    """
    id: str = Field(..., min_length=1)
    name: str
    brand: str
    price: int = Field(..., ge=0)
    original_price: Optional[int] = Field(None, ge=0)
    discount: Optional[int] = Field(None, ge=0, le=100, description="Discount percentage")
    rating: float = Field(0.0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    image: str = ""
    images: List[str] = Field(default_factory=list)
    category: str
    subcategory: Optional[str] = None
    description: str = ""
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    in_stock: bool = True
    is_new: bool = False
    is_bestseller: bool = False

    model_config = {"frozen": True}

    @property
    def effective_discount(self) -> int:
        return self.discount or 0


class ProductList(CamelModel):
    products: List[Product]
    total: int
    active_filters: int = 0
    sort: str


class PriceRangeOption(CamelModel):
    label: str
    min: int
    max: int


class SortOptionResponse(CamelModel):
    label: str
    value: str


class CatalogFacets(CamelModel):
    categories: List[str]
    brands: List[str]
    price_ranges: List[PriceRangeOption]
    ratings: List[int]
    sort_options: List[SortOptionResponse]
