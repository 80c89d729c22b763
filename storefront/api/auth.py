from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.api.deps import get_cart_registry, get_current_user, get_storage, security
from storefront.config import settings
from storefront.core.exceptions import AuthenticationError
from storefront.core.rate_limit import limiter
from storefront.core.security import create_access_token, token_ttl_seconds, verify_token
from storefront.core.storage import KeyValueStorage
from storefront.database import get_db
from storefront.models.user import User
from storefront.schemas.auth import AuthResponse, LoginRequest
from storefront.schemas.common import MessageResponse
from storefront.schemas.user import UserCreate, UserResponse
from storefront.services.cart_service import CartRegistry
from storefront.services.user_service import user_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    access_token = create_access_token({"user_id": user.id})
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create an account and sign it in. 409 if the email is already registered."""
    user = await user_service.create(db, user_data)
    logger.info(f"[AUTH] Registered user {user.id}")
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Email and password login"""
    user = await user_service.authenticate(db, credentials.email, credentials.password)
    if not user:
        logger.info("[AUTH] Login failed: bad credentials")
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    user = await user_service.touch_last_login(db, user)
    logger.info(f"[AUTH] User {user.id} logged in")
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: User = Depends(get_current_user),
    storage: KeyValueStorage = Depends(get_storage),
    carts: CartRegistry = Depends(get_cart_registry),
):
    """
    Logout: blacklist the presented token until it expires.
    The stored cart is kept for the next login.
    """
    token = credentials.credentials
    payload = verify_token(token, "access") or {}

    blacklisted = await storage.blacklist_token(token, token_ttl_seconds(payload))
    if blacklisted:
        logger.info(f"[AUTH] Token blacklisted for user {current_user.id}")
    else:
        logger.warning("[AUTH] Storage unavailable - token not blacklisted (still expires naturally)")

    carts.discard(current_user.id)
    return MessageResponse(message="Successfully logged out")
