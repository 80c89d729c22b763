"""
Script to load the bundled catalog into the database

Usage:
    python scripts/seed_catalog.py

The products table is only filled when it is empty.
"""
import asyncio

from storefront.config import settings
from storefront.data.products import PRODUCTS
from storefront.database import async_session_maker, close_db, init_db
from storefront.services.product_service import product_service


async def seed():
    print(f"📊 Connecting to database...")
    print(f"   Database: {settings.DATABASE_URL.split('@')[-1] if '@' in settings.DATABASE_URL else settings.DATABASE_URL}")

    await init_db()
    async with async_session_maker() as session:
        inserted = await product_service.seed_catalog(session, PRODUCTS)
        total = await product_service.count(session)

    if inserted:
        print(f"✅ Inserted {inserted} products")
    else:
        print(f"ℹ️  Catalog already has {total} products, nothing to do")

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed())
