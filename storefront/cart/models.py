"""Cart models with Decimal-based pricing."""
import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, field_validator

from storefront.services.models import Product
from storefront.services.money import multiply


class ProductRef(BaseModel):
    """
    Immutable snapshot of a product taken when it is added to the cart.

    Remote product payloads are loosely typed; this model is the boundary
    where they become strict: id is a non-empty string, price is a finite
    non-negative Decimal.
    """
    id: str
    name: str = ""
    price: Decimal
    images: tuple[str, ...] = ()
    slug: Optional[str] = None

    class Config:
        frozen = True
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("id must be a string")
        if isinstance(v, int):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("id must be a non-empty string")
        return v.strip()

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v):
        return "" if v is None else str(v)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        if v is None or isinstance(v, bool):
            raise ValueError("price is required")
        try:
            price = v if isinstance(v, Decimal) else Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError(f"price is not numeric: {v!r}")
        if not price.is_finite() or price < 0:
            raise ValueError("price must be a finite non-negative number")
        return price

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,) if v else ()
        return tuple(str(item) for item in v if item)

    @classmethod
    def from_product(cls, product: Union["ProductRef", Product, dict]) -> "ProductRef":
        """
        Snapshot a product from the remote service.

        Raises:
            ValueError: (pydantic ValidationError) when id or price is unusable
        """
        if isinstance(product, ProductRef):
            return product
        if isinstance(product, BaseModel):
            product = product.model_dump()
        if not isinstance(product, dict):
            raise ValueError(f"Cannot build ProductRef from {type(product).__name__}")
        return cls.model_validate(product)

    def to_dict(self) -> dict:
        """Convert to JSON-safe dictionary; price kept as a string."""
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "images": list(self.images),
            "slug": self.slug,
        }


@dataclass(frozen=True)
class CartEntry:
    """Single product/quantity pairing in the cart."""
    product: ProductRef
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        """Price snapshot times quantity."""
        return multiply(self.product.price, self.quantity)

    def to_dict(self) -> dict:
        return {"product": self.product.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict) -> "CartEntry":
        """Create from dictionary; rejects quantities below 1."""
        if not isinstance(data, dict):
            raise TypeError("cart entry must be an object")
        quantity = data.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"invalid cart quantity: {quantity!r}")
        return cls(product=ProductRef.from_product(data["product"]), quantity=quantity)


@dataclass(frozen=True)
class CartState:
    """
    Ordered, immutable snapshot of the cart.

    Entries keep insertion order and hold at most one entry per product id.
    Totals are recomputed on every read.
    """
    entries: tuple[CartEntry, ...] = field(default_factory=tuple)

    @property
    def cart_count(self) -> int:
        """Total number of units in the cart."""
        return sum(entry.quantity for entry in self.entries)

    @property
    def cart_total(self) -> Decimal:
        """Sum of price x quantity across entries."""
        return sum((entry.line_total for entry in self.entries), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def product_ids(self) -> list[str]:
        return [entry.product_id for entry in self.entries]

    def get(self, product_id: str) -> Optional[CartEntry]:
        return next((entry for entry in self.entries if entry.product_id == product_id), None)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def to_list(self) -> list[dict]:
        """Serialize as an ordered list of {product, quantity}."""
        return [entry.to_dict() for entry in self.entries]

    def dumps(self) -> str:
        return json.dumps(self.to_list())

    @classmethod
    def from_entries(cls, entries: Iterable[CartEntry]) -> "CartState":
        """
        Build a state from entries, merging duplicate product ids.

        A duplicate adds its quantity to the first occurrence, which keeps
        its position and takes the later snapshot.
        """
        merged: dict[str, CartEntry] = {}
        for entry in entries:
            existing = merged.get(entry.product_id)
            if existing is None:
                merged[entry.product_id] = entry
            else:
                merged[entry.product_id] = CartEntry(
                    product=entry.product,
                    quantity=existing.quantity + entry.quantity,
                )
        return cls(entries=tuple(merged.values()))

    @classmethod
    def from_list(cls, data: Any) -> "CartState":
        """
        Create from the serialized list form.

        Raises:
            TypeError/ValueError/KeyError on malformed data
        """
        if not isinstance(data, list):
            raise TypeError("serialized cart must be a list")
        return cls.from_entries(CartEntry.from_dict(item) for item in data)

    @classmethod
    def loads(cls, raw: Union[str, bytes]) -> "CartState":
        return cls.from_list(json.loads(raw))
