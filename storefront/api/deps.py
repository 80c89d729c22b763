from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.catalog.store import CatalogStore
from storefront.core.exceptions import AuthenticationError
from storefront.core.security import verify_token
from storefront.core.storage import KeyValueStorage
from storefront.database import get_db
from storefront.models.user import User
from storefront.services.cart_service import CartRegistry, CartService
from storefront.services.recently_viewed_service import RecentlyViewedService
from storefront.services.user_service import user_service
from typing import Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> KeyValueStorage:
    return request.app.state.storage


def get_catalog(request: Request) -> CatalogStore:
    return request.app.state.catalog


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts


def get_recently_viewed(request: Request) -> RecentlyViewedService:
    return request.app.state.recently_viewed


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    storage: KeyValueStorage = Depends(get_storage),
) -> User:
    """
    Get current authenticated user
    Validates: signature, expiry, blacklist, user_id, active flag
    """
    if not credentials:
        raise AuthenticationError("Not authenticated")

    token = credentials.credentials
    payload = verify_token(token, "access")
    if not payload:
        logger.info("[AUTH] Token verification failed")
        raise AuthenticationError("Invalid or expired token")

    if await storage.is_token_blacklisted(token):
        logger.info("[AUTH] Rejected blacklisted token")
        raise AuthenticationError("Token has been revoked")

    if not payload.get("user_id"):
        raise AuthenticationError("Invalid authentication credentials - no user_id")

    user = await user_service.get_by_id(db, payload["user_id"])
    if not user:
        logger.info(f"[AUTH] User not found. user_id: {payload['user_id']}")
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


async def get_cart_service(
    current_user: User = Depends(get_current_user),
    carts: CartRegistry = Depends(get_cart_registry),
) -> CartService:
    return await carts.get(current_user.id)
