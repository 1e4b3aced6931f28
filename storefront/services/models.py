"""Remote product service models - Pydantic models for catalog payloads."""
from decimal import Decimal
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from storefront.services.money import to_decimal as _to_decimal


def _coerce_images(v) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v else []
    return [str(item) for item in v if item]


class Product(BaseModel):
    """Product as returned by the get-public-products edge function."""
    id: str
    name: str = ""
    slug: Optional[str] = None
    description: Optional[str] = None
    price: Decimal
    images: list[str] = []
    category: Optional[str] = None
    stock: int = 0
    flash_deal: bool = False
    flash_deal_end: Optional[datetime] = None
    is_featured: bool = False
    is_new_arrival: bool = False

    class Config:
        extra = "ignore"  # Ignore unknown fields from the service

    @field_validator("id", mode="before")
    @classmethod
    def convert_id_to_str(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("images", mode="before")
    @classmethod
    def convert_images(cls, v):
        return _coerce_images(v)

    def is_active_flash_deal(self, now: Optional[datetime] = None) -> bool:
        """Flash deal flag set and the deal has no end or ends in the future."""
        if not self.flash_deal:
            return False
        if self.flash_deal_end is None:
            return True
        now = now or datetime.now(timezone.utc)
        end = self.flash_deal_end
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return end > now


class ProductQuery(BaseModel):
    """Filters accepted by the get-public-products edge function."""
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    flash_deal: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_new_arrival: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    order: Optional[str] = None
    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)

    def to_params(self) -> dict[str, str]:
        """Query-string params; unset filters are dropped."""
        params = {}
        for key, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            else:
                params[key] = str(value)
        return params


class ProductPage(BaseModel):
    """One page of products: {success, data, count, totalPages, currentPage}."""
    success: bool = True
    data: list[Product] = []
    count: int = 0
    total_pages: int = Field(default=1, alias="totalPages")
    current_page: int = Field(default=1, alias="currentPage")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("count", "total_pages", "current_page", mode="before")
    @classmethod
    def default_missing_counts(cls, v, info):
        if v is None:
            return 0 if info.field_name == "count" else 1
        return v

    @field_validator("data", mode="before")
    @classmethod
    def default_missing_data(cls, v):
        return v or []

    @property
    def is_empty(self) -> bool:
        return not self.data


class Category(BaseModel):
    """Catalog category."""
    id: str
    name: str = ""
    slug: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def convert_id_to_str(cls, v):
        return str(v) if isinstance(v, int) else v
