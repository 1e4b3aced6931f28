"""
Storefront Cart Module

This package contains the cart subsystem of the storefront:
- cart: cart models, durable storage, store and consumer views
- services: money helpers and the remote product service client
- routers: FastAPI cart endpoints
- db: Upstash Redis client

Note: Imports are lazy to keep module loading cheap in serverless environments.
"""

__all__ = [
    "CartStore",
    "CartSummary",
    "ProductRef",
    "get_redis",
]


def __getattr__(name):
    """Lazy attribute access for clean serverless loading."""
    if name == "CartStore":
        from storefront.cart import CartStore
        return CartStore
    if name == "CartSummary":
        from storefront.cart import CartSummary
        return CartSummary
    if name == "ProductRef":
        from storefront.cart import ProductRef
        return ProductRef
    if name == "get_redis":
        from storefront.db import get_redis
        return get_redis
    raise AttributeError(f"module 'storefront' has no attribute '{name}'")
