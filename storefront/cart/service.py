"""Cart store: the single owner and mutator of a session's cart state."""
import asyncio
from decimal import Decimal
from typing import Callable, Optional

from storefront.errors import ERROR_INVALID_PRODUCT, ERROR_INVALID_QUANTITY
from storefront.logging import get_logger, sanitize_id_for_logging
from .models import CartEntry, CartState, ProductRef
from .storage import CartStorage, get_cart_storage

logger = get_logger(__name__)

Listener = Callable[[CartState], None]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CartStore:
    """
    Owns one cart and persists it to durable storage.

    Features:
    - add/update/remove/clear return the new CartState immediately
    - every mutation schedules a full snapshot write on the running loop;
      writes run one at a time; failures are logged and otherwise ignored
    - rehydrate() loads the persisted snapshot; bad data means empty cart
    - listeners are notified synchronously after each change

    Intended for a single writer on one event loop. Separate processes
    sharing a storage key are last-write-wins.
    """

    def __init__(self, storage: CartStorage, key: str):
        self.storage = storage
        self.key = key
        self._state = CartState()
        self._listeners: list[Listener] = []
        self._pending: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._version = 0
        self._dirty = False
        self._ready = False

    # ==================== READS ====================

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def entries(self) -> tuple[CartEntry, ...]:
        return self._state.entries

    @property
    def cart_count(self) -> int:
        return self._state.cart_count

    @property
    def cart_total(self) -> Decimal:
        return self._state.cart_total

    @property
    def is_ready(self) -> bool:
        """True once rehydrate() has completed."""
        return self._ready

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._pending) or self._dirty

    # ==================== MUTATIONS ====================

    def add_item(self, product, quantity: int = 1) -> CartState:
        """
        Add a product snapshot, or bump the quantity of an existing entry.

        An existing entry keeps its position and takes the new snapshot.
        Invalid product data or quantity leaves the cart untouched.
        """
        try:
            ref = ProductRef.from_product(product)
        except (ValueError, TypeError) as e:
            logger.warning(f"add_item ignored: {ERROR_INVALID_PRODUCT} ({type(e).__name__})")
            return self._state
        if not _is_int(quantity) or quantity < 1:
            logger.warning(f"add_item ignored: {ERROR_INVALID_QUANTITY} (got {quantity!r})")
            return self._state

        existing = self._state.get(ref.id)
        if existing is None:
            entries = (*self._state.entries, CartEntry(product=ref, quantity=quantity))
        else:
            entries = tuple(
                CartEntry(product=ref, quantity=entry.quantity + quantity)
                if entry.product_id == ref.id
                else entry
                for entry in self._state.entries
            )
        return self._commit(CartState(entries=entries))

    def update_quantity(self, product_id: str, new_quantity: int) -> CartState:
        """
        Set an entry's quantity; zero or below removes the entry.

        Unknown product ids are a no-op. No upper bound is enforced here.
        """
        if not _is_int(new_quantity):
            logger.warning(f"update_quantity ignored: {ERROR_INVALID_QUANTITY} (got {new_quantity!r})")
            return self._state
        if new_quantity <= 0:
            return self.remove_item(product_id)

        existing = self._state.get(product_id)
        if existing is None or existing.quantity == new_quantity:
            return self._state

        entries = tuple(
            CartEntry(product=entry.product, quantity=new_quantity)
            if entry.product_id == product_id
            else entry
            for entry in self._state.entries
        )
        return self._commit(CartState(entries=entries))

    def remove_item(self, product_id: str) -> CartState:
        """Remove the entry for product_id if present."""
        if self._state.get(product_id) is None:
            return self._state
        entries = tuple(entry for entry in self._state.entries if entry.product_id != product_id)
        return self._commit(CartState(entries=entries))

    def clear_cart(self) -> CartState:
        """Empty the cart and persist the empty state."""
        return self._commit(CartState())

    # ==================== SUBSCRIPTIONS ====================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with the new state after every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Cart listener failed")

    # ==================== PERSISTENCE ====================

    async def rehydrate(self) -> CartState:
        """
        Load the persisted cart.

        Missing, unreadable or corrupt data yields an empty cart. If the
        cart was already mutated in memory, the in-memory state wins.
        """
        safe_key = sanitize_id_for_logging(self.key)
        state = CartState()
        try:
            raw = await self.storage.get(self.key)
        except Exception as e:
            logger.warning(f"Failed to read cart {safe_key}: {e}")
            raw = None

        if raw:
            try:
                state = CartState.loads(raw)
            except (ValueError, TypeError, KeyError) as e:
                logger.warning(f"Corrupted cart data for {safe_key}: {type(e).__name__}")
                state = CartState()

        self._ready = True
        if self._version > 0:
            logger.info(f"Cart {safe_key} changed before rehydration, keeping in-memory state")
            return self._state

        self._state = state
        self._notify()
        return state

    async def flush(self) -> None:
        """Wait for scheduled writes and write any snapshot made outside a loop."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._dirty:
            self._dirty = False
            await self._persist(self._state, self._version)

    def _commit(self, state: CartState) -> CartState:
        self._state = state
        self._version += 1
        self._schedule_persist()
        self._notify()
        return state

    def _schedule_persist(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller); written on the next flush()
            self._dirty = True
            return

        task = loop.create_task(self._persist(self._state, self._version))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, snapshot: CartState, version: int) -> None:
        # One write in flight per store, so an older snapshot never lands last
        async with self._write_lock:
            if version < self._version:
                # A newer snapshot has its own write queued
                return
            try:
                ok = await self.storage.set(self.key, snapshot.dumps())
            except Exception as e:
                logger.error(f"Failed to persist cart {sanitize_id_for_logging(self.key)}: {e}")
                return
            if not ok:
                logger.error(f"Cart storage rejected write for {sanitize_id_for_logging(self.key)}")


async def open_cart_store(session_id: str, storage: Optional[CartStorage] = None) -> CartStore:
    """Create a store for a session and rehydrate it before first use."""
    storage = storage or get_cart_storage()
    store = CartStore(storage, key=storage.key_for(session_id))
    await store.rehydrate()
    return store
