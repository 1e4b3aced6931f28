"""Pytest configuration and fixtures"""
import os
import pytest
from decimal import Decimal

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test_anon_key")
os.environ.setdefault("CART_STORAGE", "memory")
os.environ.setdefault("DEFAULT_CURRENCY", "USD")

from storefront.cart import CartStore, MemoryCartStorage, ProductRef  # noqa: E402


@pytest.fixture
def memory_storage():
    """Empty in-memory cart storage"""
    return MemoryCartStorage()


@pytest.fixture
def store(memory_storage):
    """Cart store over in-memory storage (not rehydrated)"""
    return CartStore(memory_storage, key="cart:test-session")


@pytest.fixture
def sample_product():
    """Product payload as returned by the product service"""
    return {
        "id": "product-123",
        "name": "Linen Shirt",
        "slug": "linen-shirt",
        "price": "49.90",
        "images": ["/uploads/linen-shirt.jpg"],
        "category": "shirts",
        "stock": 12,
        "flash_deal": False,
        "is_featured": True,
    }


@pytest.fixture
def other_product():
    """A second product"""
    return {
        "id": "product-456",
        "name": "Canvas Tote",
        "slug": "canvas-tote",
        "price": 15,
        "images": [],
    }


@pytest.fixture
def product_ref(sample_product):
    return ProductRef.from_product(sample_product)


@pytest.fixture
def cheap_product():
    """Minimal {id, price} payload"""
    return {"id": "p1", "price": Decimal("10")}
