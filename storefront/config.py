from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App
    APP_NAME: str = "Storefront API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Database (async SQLAlchemy URL)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./storefront.db",
        description="Database connection URL"
    )
    SEED_CATALOG: bool = True  # Load bundled catalog when the products table is empty

    # Security - REQUIRED from environment
    SECRET_KEY: str = Field(
        ...,
        min_length=32,
        description="Secret key for JWT tokens (REQUIRED - minimum 32 characters)"
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Key-value storage for carts, recently viewed and token blacklist
    STORAGE_BACKEND: Literal["memory", "redis"] = "memory"
    STORAGE_KEY_PREFIX: str = "storefront:"
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )

    # Catalog / personalization
    RECENTLY_VIEWED_LIMIT: int = 20
    CART_CACHE_SIZE: int = 1000  # Carts kept in memory; older ones reload from storage

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: [
        "http://localhost:3000",
        "http://localhost:8081",
        "http://localhost:8082",
        "http://localhost:19006",
    ])

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: str = "100/minute"
    AUTH_RATE_LIMIT: str = "10/15minutes"

    # Client (mobile app core)
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _assemble_cors_origins(cls, value):
        """Ensure CORS origins env value always becomes a list of strings."""
        if isinstance(value, str):
            # Support JSON-style lists or simple comma-separated strings
            value = value.strip()
            if value.startswith("[") and value.endswith("]"):
                import json
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(value, (list, tuple)):
            return list(value)
        return value


settings = Settings()
