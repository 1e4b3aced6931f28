"""Read-only cart views for presentation code."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from storefront import config
from storefront.services.money import format_money, to_float
from .models import CartState
from .service import CartStore


@dataclass(frozen=True)
class CartLine:
    """Display row for one cart entry."""
    product_id: str
    name: str
    slug: Optional[str]
    image: Optional[str]
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    formatted_unit_price: str
    formatted_line_total: str

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "slug": self.slug,
            "image": self.image,
            "quantity": self.quantity,
            "unit_price": to_float(self.unit_price),
            "line_total": to_float(self.line_total),
            "formatted_unit_price": self.formatted_unit_price,
            "formatted_line_total": self.formatted_line_total,
        }


class CartSummary:
    """
    Derived cart view kept current by subscribing to a CartStore.

    Only recomputes from the state it is handed; never mutates the cart.
    """

    def __init__(self, store: CartStore, currency: Optional[str] = None):
        self.currency = (currency or config.DEFAULT_CURRENCY).upper()
        self._state = store.state
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, state: CartState) -> None:
        self._state = state

    def close(self) -> None:
        """Stop following the store."""
        self._unsubscribe()

    @property
    def item_count(self) -> int:
        return self._state.cart_count

    @property
    def subtotal(self) -> Decimal:
        return self._state.cart_total

    @property
    def formatted_subtotal(self) -> str:
        return format_money(self.subtotal, self.currency)

    @property
    def is_empty(self) -> bool:
        return self._state.is_empty

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(
            CartLine(
                product_id=entry.product_id,
                name=entry.product.name,
                slug=entry.product.slug,
                image=entry.product.images[0] if entry.product.images else None,
                quantity=entry.quantity,
                unit_price=entry.product.price,
                line_total=entry.line_total,
                formatted_unit_price=format_money(entry.product.price, self.currency),
                formatted_line_total=format_money(entry.line_total, self.currency),
            )
            for entry in self._state.entries
        )

    def to_dict(self) -> dict:
        """JSON response shape for the cart endpoints."""
        return {
            "items": [line.to_dict() for line in self.lines],
            "item_count": self.item_count,
            "subtotal": to_float(self.subtotal),
            "formatted_subtotal": self.formatted_subtotal,
            "currency": self.currency,
            "is_empty": self.is_empty,
        }

    def __enter__(self) -> "CartSummary":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
