"""Client-side shopper session: auth gate, remote cart and catalog browser"""
from typing import Optional
import logging

from storefront.catalog.browser import CatalogBrowser
from storefront.client.api_client import RemoteCartRepository, StorefrontClient
from storefront.core.exceptions import StorefrontError, ValidationError
from storefront.core.storage import KeyValueStorage
from storefront.schemas.auth import AuthResponse
from storefront.schemas.user import UserResponse
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"


class AuthGate:
    """Owns the shopper's auth token and identity, kept in key-value storage"""

    def __init__(self, storage: KeyValueStorage, client: StorefrontClient):
        self.storage = storage
        self.client = client
        self._token: Optional[str] = None
        self._user: Optional[UserResponse] = None

    @property
    def user(self) -> Optional[UserResponse]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    def get_auth_token(self) -> Optional[str]:
        return self._token

    async def load(self) -> Optional[UserResponse]:
        """
        Restore the stored token and confirm it with the API.
        Any failure drops the stored token.
        """
        self._token = await self.storage.get_item(TOKEN_KEY)
        if not self._token:
            return None
        try:
            self._user = await self.client.me()
        except StorefrontError as e:
            logger.warning(f"[AUTH] Stored token rejected: {e.message}")
            await self._forget()
            return None
        await self.storage.set_json(USER_KEY, self._user.model_dump(mode="json"))
        return self._user

    async def login(self, email: str, password: str) -> UserResponse:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Please provide both email and password")
        return await self._remember(await self.client.login(email, password))

    async def signup(self, name: str, email: str, password: str, phone: Optional[str] = None) -> UserResponse:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Please provide name, email and password")
        return await self._remember(await self.client.register(name, email, password, phone))

    async def logout(self) -> None:
        """Tell the API (best effort), then always forget the local credentials"""
        if self._token:
            try:
                await self.client.logout()
            except StorefrontError as e:
                logger.warning(f"[AUTH] Logout request failed: {e.message}")
        await self._forget()

    async def _remember(self, auth: AuthResponse) -> UserResponse:
        await self.storage.set_item(TOKEN_KEY, auth.access_token)
        await self.storage.set_json(USER_KEY, auth.user.model_dump(mode="json"))
        self._token = auth.access_token
        self._user = auth.user
        logger.info(f"[AUTH] Signed in as user {auth.user.id}")
        return auth.user

    async def _forget(self) -> None:
        self._token = None
        self._user = None
        await self.storage.delete_item(TOKEN_KEY)
        await self.storage.delete_item(USER_KEY)


class ShopperSession:
    """
    Explicit session context for a client app.

    Bundles the auth gate, a cart reconciler persisting through the API, and a
    catalog browser fed by the API.
    """

    def __init__(self, storage: KeyValueStorage, client: Optional[StorefrontClient] = None):
        self.client = client or StorefrontClient()
        self.auth = AuthGate(storage, self.client)
        self.client.token_provider = self.auth.get_auth_token
        self.cart = CartService(RemoteCartRepository(self.client))
        self.catalog = CatalogBrowser(self.client.fetch_catalog)

    async def start(self) -> None:
        """Restore auth and, when signed in, load the cart"""
        if await self.auth.load():
            await self.cart.load()

    async def login(self, email: str, password: str) -> UserResponse:
        user = await self.auth.login(email, password)
        await self.cart.load()
        return user

    async def signup(self, name: str, email: str, password: str, phone: Optional[str] = None) -> UserResponse:
        user = await self.auth.signup(name, email, password, phone)
        await self.cart.load()
        return user

    async def logout(self) -> None:
        await self.auth.logout()
        self.cart.reset()

    async def close(self) -> None:
        await self.client.close()
