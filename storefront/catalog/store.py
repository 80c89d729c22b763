"""Catalog Store: the immutable, ordered product sequence everything else reads"""
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from storefront.core.exceptions import NotFoundError
from storefront.schemas.product import Product
from storefront.services.product_service import product_service

logger = logging.getLogger(__name__)


class CatalogStore:
    """Read-only view over a catalog snapshot, in catalog order"""

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Tuple[Product, ...] = tuple(products)
        self._by_id: Dict[str, Product] = {product.id: product for product in self._products}

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "CatalogStore":
        return cls(Product.model_validate(record) for record in records)

    @classmethod
    async def load(cls, db: AsyncSession) -> "CatalogStore":
        """Load the catalog from the database"""
        products = await product_service.list_all(db)
        logger.info(f"[CATALOG] Loaded {len(products)} products")
        return cls(products)

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def require(self, product_id: str) -> Product:
        product = self._by_id.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def brands(self) -> List[str]:
        """Distinct brands in catalog order"""
        return list(dict.fromkeys(product.brand for product in self._products))

    def categories(self) -> List[str]:
        return list(dict.fromkeys(product.category for product in self._products))

    async def snapshot(self) -> Tuple[Product, ...]:
        """Async catalog source, interchangeable with a remote fetch"""
        return self._products
