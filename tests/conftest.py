"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-storefront-0123456789abcdef")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DEBUG"] = "false"

import pytest
from contextlib import asynccontextmanager
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import storefront.models  # noqa: F401
from storefront.catalog.store import CatalogStore
from storefront.core.rate_limit import limiter
from storefront.core.storage import MemoryStorage
from storefront.data.products import PRODUCTS
from storefront.database import Base, get_db
from storefront.services.product_service import product_service

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def catalog():
    """Bundled catalog as an in-memory store"""
    return CatalogStore.from_records(PRODUCTS)


@pytest.fixture
def products(catalog):
    return list(catalog)


@pytest.fixture
def product_by_id(catalog):
    return catalog.require


@pytest.fixture(scope="function")
def client():
    """Test client on a fresh in-memory database and memory storage"""
    from storefront.main import app, attach_services

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def test_lifespan(app):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with session_maker() as db:
            await product_service.seed_catalog(db, PRODUCTS)
            catalog = await CatalogStore.load(db)
        attach_services(app, MemoryStorage(), catalog)
        yield
        await engine.dispose()

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.router.lifespan_context = test_lifespan
    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register an account through the API and return the auth response body"""
    def _register(email="shopper@example.com", password="secret123", name="Test Shopper"):
        response = client.post("/api/v1/auth/register", json={
            "email": email,
            "password": password,
            "name": name,
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _register


@pytest.fixture
def registered_user(register):
    return register()


@pytest.fixture
def auth_headers(registered_user):
    """Create authorization headers"""
    return {"Authorization": f"Bearer {registered_user['access_token']}"}
