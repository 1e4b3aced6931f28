"""
Shared Dependencies for Routers

Per-session cart stores and lazily created service clients.
"""

from collections import OrderedDict
from typing import Optional

from fastapi import Header, HTTPException, Request

from storefront.cart import CartStorage, CartStore, get_cart_storage, open_cart_store
from storefront.errors import ERROR_CART_SESSION_REQUIRED
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.products import ProductService, get_product_service

logger = get_logger(__name__)

MAX_SESSIONS = 1000


class CartStoreRegistry:
    """
    Hands out one rehydrated CartStore per cart session.

    Least recently used sessions are dropped past max_sessions. An evicted
    store's outstanding writes are awaited before it is let go; a request
    for that session in the meantime gets the same store back.
    """

    def __init__(self, storage: Optional[CartStorage] = None, max_sessions: int = MAX_SESSIONS):
        self._storage = storage
        self.max_sessions = max_sessions
        self._stores: "OrderedDict[str, CartStore]" = OrderedDict()
        self._draining: dict[str, CartStore] = {}

    @property
    def storage(self) -> CartStorage:
        if self._storage is None:
            self._storage = get_cart_storage()
        return self._storage

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._stores

    async def get(self, session_id: str) -> CartStore:
        """Get the session's store, rehydrating it on first use."""
        store = self._claim(session_id)
        if store is None:
            opened = await open_cart_store(session_id, self.storage)
            # A concurrent request may have opened the same session meanwhile
            store = self._claim(session_id) or opened
            self._stores[session_id] = store
        self._stores.move_to_end(session_id)

        await self._evict()
        return store

    def _claim(self, session_id: str) -> Optional[CartStore]:
        store = self._stores.get(session_id)
        if store is None:
            store = self._draining.pop(session_id, None)
            if store is not None:
                self._stores[session_id] = store
        return store

    async def _evict(self) -> None:
        evicted = []
        while len(self._stores) > self.max_sessions:
            evicted_id, evicted_store = self._stores.popitem(last=False)
            self._draining[evicted_id] = evicted_store
            evicted.append((evicted_id, evicted_store))

        for evicted_id, evicted_store in evicted:
            await evicted_store.flush()
            if self._draining.get(evicted_id) is evicted_store:
                del self._draining[evicted_id]
            logger.debug(f"Evicted cart session {sanitize_id_for_logging(evicted_id)}")

    async def flush_all(self) -> None:
        """Wait for the outstanding writes of every live or evicted store."""
        for store in [*self._stores.values(), *self._draining.values()]:
            await store.flush()


async def get_cart_store(
    request: Request,
    x_cart_session: Optional[str] = Header(default=None),
) -> CartStore:
    """Resolve the caller's cart store from the X-Cart-Session header."""
    session_id = (x_cart_session or "").strip()
    if not session_id:
        raise HTTPException(status_code=400, detail=ERROR_CART_SESSION_REQUIRED)
    registry: CartStoreRegistry = request.app.state.cart_registry
    return await registry.get(session_id)


def get_products() -> ProductService:
    """Product service dependency (overridden in tests)."""
    try:
        return get_product_service()
    except ValueError as e:
        logger.error(f"Product service not configured: {e}")
        raise HTTPException(status_code=503, detail=str(e))
