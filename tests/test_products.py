"""Tests for the product service client"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest

from storefront.services.models import Product, ProductPage, ProductQuery
from storefront.services.products import (
    ProductNotFoundError,
    ProductService,
    ProductServiceError,
)

BASE_URL = "https://test.supabase.co"


def make_service(handler):
    """ProductService whose HTTP calls go to handler."""
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=f"{BASE_URL}/functions/v1/",
    )
    return ProductService(base_url=BASE_URL, api_key="anon-key", client=client)


class TestProductQuery:

    def test_to_params(self):
        query = ProductQuery(category="shirts", flash_deal=True, is_featured=False, min_price=Decimal("9.5"), limit=8)

        assert query.to_params() == {
            "category": "shirts",
            "flash_deal": "true",
            "is_featured": "false",
            "min_price": "9.5",
            "limit": "8",
        }

    def test_empty_query(self):
        assert ProductQuery().to_params() == {}

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            ProductQuery(limit=0)


class TestProductModel:

    def test_flash_deal_active(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        product = Product(id="p1", price=1, flash_deal=True, flash_deal_end=now + timedelta(hours=1))
        assert product.is_active_flash_deal(now)

    def test_flash_deal_expired(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        product = Product(id="p1", price=1, flash_deal=True, flash_deal_end=now - timedelta(seconds=1))
        assert not product.is_active_flash_deal(now)

    def test_flash_deal_without_end(self):
        assert Product(id="p1", price=1, flash_deal=True).is_active_flash_deal()

    def test_not_a_flash_deal(self):
        assert not Product(id="p1", price=1).is_active_flash_deal()

    def test_page_parses_camel_case(self):
        page = ProductPage.model_validate({
            "success": True,
            "data": [{"id": 7, "name": "Cap", "price": "12.00", "images": "/cap.jpg"}],
            "count": 1,
            "totalPages": 3,
            "currentPage": 2,
        })

        assert page.total_pages == 3
        assert page.current_page == 2
        assert page.data[0].id == "7"
        assert page.data[0].images == ["/cap.jpg"]


@pytest.mark.asyncio
async def test_fetch_products_sends_filters_and_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["apikey"] = request.headers.get("apikey")
        return httpx.Response(200, json={
            "success": True,
            "data": [{"id": "p1", "name": "Shirt", "price": 20}],
            "count": 1,
            "totalPages": 1,
            "currentPage": 1,
        })

    service = make_service(handler)
    page = await service.fetch_products(ProductQuery(is_featured=True, limit=8))
    await service.aclose()

    assert seen["path"] == "/functions/v1/get-public-products"
    assert seen["params"] == {"is_featured": "true", "limit": "8"}
    assert seen["apikey"] == "anon-key"
    assert page.count == 1
    assert page.data[0].price == Decimal("20")


@pytest.mark.asyncio
async def test_empty_result_is_not_an_error():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": [], "count": 0, "totalPages": 0, "currentPage": 1})

    service = make_service(handler)
    page = await service.fetch_products()

    assert page.success
    assert page.is_empty


@pytest.mark.asyncio
async def test_success_false_raises():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error": "Invalid category"})

    service = make_service(handler)
    with pytest.raises(ProductServiceError) as exc_info:
        await service.fetch_products(ProductQuery(category="nope"))

    assert exc_info.value.message == "Invalid category"


@pytest.mark.asyncio
async def test_http_error_uses_body_message():
    def handler(request):
        return httpx.Response(500, json={"error": "database unavailable"})

    service = make_service(handler)
    with pytest.raises(ProductServiceError) as exc_info:
        await service.fetch_products()

    assert exc_info.value.message == "database unavailable"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_http_error_without_body():
    def handler(request):
        return httpx.Response(503, text="upstream timeout")

    service = make_service(handler)
    with pytest.raises(ProductServiceError) as exc_info:
        await service.fetch_products()

    assert exc_info.value.message == "HTTP error! status: 503"


@pytest.mark.asyncio
async def test_malformed_listing_raises():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": [{"name": "no id"}]})

    service = make_service(handler)
    with pytest.raises(ProductServiceError):
        await service.fetch_products()


@pytest.mark.asyncio
async def test_transport_error_is_retried():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(handler)
    with pytest.raises(ProductServiceError):
        await service.fetch_products()

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_fetch_product_by_slug():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["identifier"] = request.url.params.get("identifier")
        return httpx.Response(200, json={"success": True, "data": {"id": "p1", "slug": "linen shirt", "price": "49.90"}})

    service = make_service(handler)
    product = await service.fetch_product("linen shirt")

    assert seen["path"] == "/functions/v1/get-public-product-detail"
    assert seen["identifier"] == "linen shirt"
    assert product.id == "p1"


@pytest.mark.asyncio
async def test_fetch_product_not_found_status():
    def handler(request):
        return httpx.Response(404, json={"success": False, "error": "Product not found"})

    service = make_service(handler)
    with pytest.raises(ProductNotFoundError):
        await service.fetch_product("missing")


@pytest.mark.asyncio
async def test_fetch_product_empty_data():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": None})

    service = make_service(handler)
    with pytest.raises(ProductNotFoundError):
        await service.fetch_product("missing")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"data": [{"id": 1, "name": "Shirts"}, {"id": "2", "name": "Bags"}]},
    [{"id": 1, "name": "Shirts"}, {"id": "2", "name": "Bags"}],
])
async def test_fetch_categories(body):
    def handler(request):
        assert request.headers["Authorization"] == "Bearer anon-key"
        return httpx.Response(200, json=body)

    service = make_service(handler)
    categories = await service.fetch_categories()

    assert [c.id for c in categories] == ["1", "2"]
    assert categories[1].name == "Bags"
