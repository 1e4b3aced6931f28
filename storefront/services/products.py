"""
Product Service Client

Read-only client for the storefront's Supabase edge functions:
- get-public-products: filtered, paginated product listing
- get-public-product-detail: single product by slug or id
- get-public-categories: category list

A failed call raises ProductServiceError; an empty listing is a normal
ProductPage with no data. Callers can tell "service error" from
"no products found".
"""
from typing import Any, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront import config
from storefront.errors import (
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_PRODUCT_SERVICE,
    ERROR_PRODUCT_SERVICE_NOT_CONFIGURED,
)
from storefront.logging import get_logger, sanitize_for_logging
from storefront.services.models import Category, Product, ProductPage, ProductQuery

logger = get_logger(__name__)

PRODUCTS_FUNCTION = "get-public-products"
PRODUCT_DETAIL_FUNCTION = "get-public-product-detail"
CATEGORIES_FUNCTION = "get-public-categories"


class ProductServiceError(Exception):
    """Remote product service failed or reported success=false."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProductNotFoundError(ProductServiceError):
    """Product detail lookup matched nothing."""


def _error_message(response: httpx.Response) -> str:
    """Pull {"error": ...} out of an error body, else a status message."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP error! status: {response.status_code}"


class ProductService:
    """Async client for the product edge functions."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            base_url: Supabase project URL (defaults to SUPABASE_URL)
            api_key: Supabase anon key (defaults to SUPABASE_ANON_KEY)
            client: Pre-built httpx client (tests inject a MockTransport one)
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url if base_url is not None else config.SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.SUPABASE_ANON_KEY
        self.timeout = timeout or config.PRODUCT_SERVICE_TIMEOUT
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get httpx client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/functions/v1/",
                timeout=self.timeout,
            )
        return self._client

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    async def _request(self, function: str, params: Optional[dict] = None) -> httpx.Response:
        return await self.client.get(function, params=params, headers=self.headers)

    async def _get_json(self, function: str, params: Optional[dict] = None) -> Any:
        try:
            response = await self._request(function, params)
        except httpx.TransportError as e:
            logger.error(f"Product service unreachable ({function}): {e}")
            raise ProductServiceError(ERROR_PRODUCT_SERVICE) from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                f"Product service error ({function}): {sanitize_for_logging(message)}"
            )
            if response.status_code == 404:
                raise ProductNotFoundError(message, status_code=404)
            raise ProductServiceError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Product service returned invalid JSON ({function})")
            raise ProductServiceError(ERROR_PRODUCT_SERVICE, status_code=response.status_code) from e

        if isinstance(body, dict) and body.get("success") is False:
            raise ProductServiceError(body.get("error") or ERROR_PRODUCT_SERVICE, status_code=response.status_code)
        return body

    async def fetch_products(self, query: Optional[ProductQuery] = None) -> ProductPage:
        """Fetch one page of products matching the query."""
        params = (query or ProductQuery()).to_params()
        body = await self._get_json(PRODUCTS_FUNCTION, params)
        if not isinstance(body, dict):
            raise ProductServiceError(ERROR_PRODUCT_SERVICE)
        try:
            return ProductPage.model_validate(body)
        except ValidationError as e:
            logger.error(f"Malformed product listing: {e.error_count()} errors")
            raise ProductServiceError(ERROR_PRODUCT_SERVICE) from e

    async def fetch_product(self, identifier: str) -> Product:
        """Fetch a single product by slug or id."""
        body = await self._get_json(PRODUCT_DETAIL_FUNCTION, {"identifier": identifier})
        data = body.get("data") if isinstance(body, dict) else None
        if not data:
            raise ProductNotFoundError(ERROR_PRODUCT_NOT_FOUND, status_code=404)
        try:
            return Product.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed product detail: {e.error_count()} errors")
            raise ProductServiceError(ERROR_PRODUCT_SERVICE) from e

    async def fetch_categories(self) -> list[Category]:
        """Fetch all categories. The function answers {data: [...]} or a bare list."""
        body = await self._get_json(CATEGORIES_FUNCTION)
        items = body.get("data", []) if isinstance(body, dict) else body
        try:
            return [Category.model_validate(item) for item in items or []]
        except ValidationError as e:
            raise ProductServiceError(ERROR_PRODUCT_SERVICE) from e


_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get ProductService singleton."""
    global _product_service
    if _product_service is None:
        if not config.SUPABASE_URL or not config.SUPABASE_ANON_KEY:
            raise ValueError(ERROR_PRODUCT_SERVICE_NOT_CONFIGURED)
        _product_service = ProductService()
    return _product_service


async def close_product_service() -> None:
    global _product_service
    if _product_service is not None:
        await _product_service.aclose()
        _product_service = None
