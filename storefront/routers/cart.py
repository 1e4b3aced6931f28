"""
Cart Router

Shopping cart endpoints. The session is picked by the X-Cart-Session
header; every response is the cart summary after the operation.

Writes to durable storage run as background tasks after the response.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from storefront.cart import CartStore, CartSummary, ProductRef
from storefront.errors import ERROR_PRODUCT_NOT_FOUND, ERROR_PRODUCT_SERVICE
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.products import ProductNotFoundError, ProductService, ProductServiceError
from .deps import get_cart_store, get_products
from .models import AddToCartRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


def _summary_response(store: CartStore, currency: Optional[str] = None) -> dict:
    with CartSummary(store, currency) as summary:
        return summary.to_dict()


@router.get("/cart")
async def get_cart(currency: Optional[str] = None, store: CartStore = Depends(get_cart_store)):
    """Get the session's cart."""
    return _summary_response(store, currency)


@router.post("/cart/items")
async def add_to_cart(
    request: AddToCartRequest,
    background_tasks: BackgroundTasks,
    store: CartStore = Depends(get_cart_store),
    products: ProductService = Depends(get_products),
):
    """Fetch the product and add a snapshot of it to the cart."""
    try:
        product = await products.fetch_product(request.product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_PRODUCT_NOT_FOUND)
    except ProductServiceError as e:
        logger.error(f"Failed to fetch product {sanitize_id_for_logging(request.product_id)}: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)

    try:
        ref = ProductRef.from_product(product)
    except ValueError:
        logger.error(f"Product {sanitize_id_for_logging(request.product_id)} has an unusable id or price")
        raise HTTPException(status_code=502, detail=ERROR_PRODUCT_SERVICE)

    store.add_item(ref, request.quantity)
    background_tasks.add_task(store.flush)
    return _summary_response(store)


@router.patch("/cart/items/{product_id}")
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    background_tasks: BackgroundTasks,
    store: CartStore = Depends(get_cart_store),
):
    """Update item quantity (0 or below removes it)."""
    store.update_quantity(product_id, request.quantity)
    background_tasks.add_task(store.flush)
    return _summary_response(store)


@router.delete("/cart/items/{product_id}")
async def remove_cart_item(
    product_id: str,
    background_tasks: BackgroundTasks,
    store: CartStore = Depends(get_cart_store),
):
    """Remove item from cart."""
    store.remove_item(product_id)
    background_tasks.add_task(store.flush)
    return _summary_response(store)


@router.delete("/cart")
async def clear_cart(background_tasks: BackgroundTasks, store: CartStore = Depends(get_cart_store)):
    """Empty the cart."""
    store.clear_cart()
    background_tasks.add_task(store.flush)
    return _summary_response(store)
