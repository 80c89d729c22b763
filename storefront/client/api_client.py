"""
Async HTTP client for the Storefront API, used by the client-side session.

Transport failures surface as NetworkError; error responses are mapped onto
the same error taxonomy the server raises.
"""
from typing import Any, Callable, Dict, List, Optional
import logging

import httpx

from storefront.config import settings
from storefront.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.schemas.auth import AuthResponse
from storefront.schemas.cart import CartResponse, CartState
from storefront.schemas.filters import FilterCriteria, SortKey
from storefront.schemas.product import Product, ProductList
from storefront.schemas.user import UserResponse
from storefront.services.cart_repository import CartRepository

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


class StorefrontClient:
    """
    Thin wrapper over the REST API.

    The bearer token is read from token_provider on every request, so the
    client always uses whatever the auth gate currently holds.
    """

    def __init__(
        self,
        base_url: str = settings.API_BASE_URL,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        client = await self._get_http_client()
        try:
            response = await client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkError(f"Request to {path} failed") from e

        if response.is_success:
            return response.json() if response.content else None

        detail = _error_detail(response)
        status = response.status_code
        logger.info(f"{method} {path} returned {status}: {detail}")
        if status in (400, 422):
            raise ValidationError(detail)
        if status == 401:
            raise AuthenticationError(detail)
        if status == 404:
            raise NotFoundError("Resource", path)
        if status == 409:
            raise ConflictError(detail)
        if status >= 500:
            raise NetworkError(detail, {"status": status})
        raise StorefrontError(detail, {"status": status})

    # Auth

    async def register(self, name: str, email: str, password: str, phone: Optional[str] = None) -> AuthResponse:
        payload = {"name": name, "email": email, "password": password}
        if phone:
            payload["phone"] = phone
        return AuthResponse.model_validate(await self._request("POST", "/auth/register", json=payload))

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return AuthResponse.model_validate(data)

    async def me(self) -> UserResponse:
        return UserResponse.model_validate(await self._request("GET", "/auth/me"))

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    # Catalog

    async def list_products(
        self,
        criteria: Optional[FilterCriteria] = None,
        sort: SortKey = SortKey.POPULARITY,
        search_text: str = "",
    ) -> ProductList:
        params: Dict[str, Any] = {"sort": sort.value}
        if search_text:
            params["q"] = search_text
        if criteria is not None:
            if criteria.categories:
                params["categories"] = sorted(criteria.categories)
            if criteria.brands:
                params["brands"] = sorted(criteria.brands)
            if criteria.price_range.is_constrained:
                params["min_price"] = criteria.price_range.min
                params["max_price"] = criteria.price_range.max
            if criteria.rating > 0:
                params["rating"] = criteria.rating
        return ProductList.model_validate(await self._request("GET", "/products", params=params))

    async def fetch_catalog(self) -> List[Product]:
        """Whole catalog, usable as a CatalogBrowser source"""
        return (await self.list_products()).products

    async def get_product(self, product_id: str) -> Product:
        return Product.model_validate(await self._request("GET", f"/products/{product_id}"))

    async def record_view(self, product_id: str) -> None:
        await self._request("POST", f"/products/{product_id}/view")

    async def recently_viewed(self) -> List[Product]:
        data = await self._request("GET", "/users/recently-viewed")
        return [Product.model_validate(item) for item in data]

    # Cart

    async def get_cart(self) -> CartResponse:
        return CartResponse.model_validate(await self._request("GET", "/cart"))

    async def put_cart(self, state: CartState) -> CartResponse:
        def refs(lines):
            return [
                {"productId": line.product.id, "size": line.size, "color": line.color, "quantity": line.quantity}
                for line in lines
            ]

        payload = {"cart": refs(state.cart), "savedForLater": refs(state.saved_for_later)}
        return CartResponse.model_validate(await self._request("PUT", "/cart", json=payload))


class RemoteCartRepository(CartRepository):
    """Persists the cart through the API with the shopper's bearer token"""

    def __init__(self, client: StorefrontClient):
        self.client = client

    async def load(self) -> CartState:
        response = await self.client.get_cart()
        return CartState(cart=response.cart, saved_for_later=response.saved_for_later)

    async def save(self, state: CartState) -> None:
        await self.client.put_cart(state)
