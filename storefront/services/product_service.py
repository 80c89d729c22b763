from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from storefront.models.product import Product as ProductModel
from storefront.schemas.product import Product
from typing import Iterable, List
import logging

logger = logging.getLogger(__name__)

_SCHEMA_FIELDS = tuple(Product.model_fields)


class ProductService:
    """Product service for catalog persistence"""

    @staticmethod
    def to_schema(row: ProductModel) -> Product:
        """Convert a database row into the immutable catalog record"""
        return Product.model_validate({field: getattr(row, field) for field in _SCHEMA_FIELDS})

    @staticmethod
    async def list_all(db: AsyncSession) -> List[Product]:
        """All products in catalog order"""
        result = await db.execute(
            select(ProductModel).order_by(ProductModel.position, ProductModel.id)
        )
        return [ProductService.to_schema(row) for row in result.scalars().all()]

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(ProductModel))
        return result.scalar() or 0

    @staticmethod
    async def seed_catalog(db: AsyncSession, records: Iterable[dict]) -> int:
        """
        Insert bundled catalog records when the products table is empty.
        Returns the number of products inserted.
        """
        if await ProductService.count(db) > 0:
            return 0

        inserted = 0
        for position, record in enumerate(records):
            product = Product.model_validate(record)
            db.add(ProductModel(position=position, **product.model_dump()))
            inserted += 1

        await db.commit()
        logger.info(f"[CATALOG] Seeded {inserted} products")
        return inserted


product_service = ProductService()
