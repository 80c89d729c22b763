from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging

from storefront.config import settings
from storefront.database import init_db, close_db, async_session_maker
from storefront.catalog.store import CatalogStore
from storefront.core.exceptions import StorefrontError
from storefront.core.rate_limit import limiter
from storefront.core.storage import KeyValueStorage, create_storage
from storefront.data.products import PRODUCTS
from storefront.services.cart_service import CartRegistry
from storefront.services.product_service import product_service
from storefront.services.recently_viewed_service import RecentlyViewedService

# Import routers
from storefront.api import auth, users, products, cart

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Reduce SQLAlchemy log verbosity
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def attach_services(app: FastAPI, storage: KeyValueStorage, catalog: CatalogStore) -> None:
    """Install the per-process collaborators the API dependencies read from app.state"""
    app.state.storage = storage
    app.state.catalog = catalog
    app.state.carts = CartRegistry(storage, catalog, settings.CART_CACHE_SIZE)
    app.state.recently_viewed = RecentlyViewedService(storage, catalog, settings.RECENTLY_VIEWED_LIMIT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting Storefront API...")

    await init_db()

    async with async_session_maker() as db:
        if settings.SEED_CATALOG:
            await product_service.seed_catalog(db, PRODUCTS)
        catalog = await CatalogStore.load(db)

    storage = await create_storage()
    logger.info(f"Storage backend: {storage.backend_name}")

    attach_services(app, storage, catalog)
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await storage.close()
    await close_db()
    logger.info("Application shutdown complete")


# Disable docs in production
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Storefront API - catalog search, shopping cart and accounts",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["Users"])
app.include_router(products.router, prefix=f"{settings.API_V1_PREFIX}/products", tags=["Products"])
app.include_router(cart.router, prefix=f"{settings.API_V1_PREFIX}/cart", tags=["Cart"])


@app.get("/")
async def root():
    response = {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }

    # Only show docs links in development
    if settings.DEBUG:
        response["docs"] = "/docs"
        response["redoc"] = "/redoc"

    return response


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint with database and storage status"""
    health_status = {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }

    # Check database connection
    try:
        async with async_session_maker() as db:
            await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"] = f"disconnected: {str(e)}"
        logger.error(f"Health check failed: {e}")

    storage = getattr(request.app.state, "storage", None)
    health_status["storage"] = storage.backend_name if storage is not None else "unavailable"
    catalog = getattr(request.app.state, "catalog", None)
    health_status["products"] = len(catalog) if catalog is not None else 0

    return health_status


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
