"""Cart package: models, storage, store and read-only views."""
from .models import CartEntry, CartState, ProductRef
from .service import CartStore, open_cart_store
from .storage import CartStorage, MemoryCartStorage, RedisCartStorage, get_cart_storage
from .views import CartLine, CartSummary

__all__ = [
    "CartEntry",
    "CartState",
    "ProductRef",
    "CartStore",
    "open_cart_store",
    "CartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
    "get_cart_storage",
    "CartLine",
    "CartSummary",
]
