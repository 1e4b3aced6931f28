"""API routers.

Combines the cart endpoints under the /api prefix.
"""

from fastapi import APIRouter

from .cart import router as cart_router
from .deps import CartStoreRegistry, get_cart_store, get_products

router = APIRouter(prefix="/api")
router.include_router(cart_router)

__all__ = ["router", "CartStoreRegistry", "get_cart_store", "get_products"]
