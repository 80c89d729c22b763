from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from storefront.core.exceptions import ConflictError
from storefront.core.security import get_password_hash, verify_password
from storefront.database import utc_now
from storefront.models.user import User
from storefront.schemas.user import UserCreate
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class UserService:
    """User service for business logic"""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        """Get user by ID"""
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)"""
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def create(db: AsyncSession, user_data: UserCreate) -> User:
        """Register a new user. Raises ConflictError if the email is taken."""
        email = user_data.email.strip().lower()
        if await UserService.get_by_email(db, email):
            raise ConflictError("User with this email already exists", {"email": email})

        user = User(
            email=email,
            name=user_data.name,
            phone=user_data.phone,
            password_hash=get_password_hash(user_data.password),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"User created: {user.email}")
        return user

    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, None otherwise"""
        user = await UserService.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    async def touch_last_login(db: AsyncSession, user: User) -> User:
        user.last_login = utc_now()
        await db.commit()
        await db.refresh(user)
        return user


user_service = UserService()
