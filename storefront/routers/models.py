"""
Cart API Pydantic Models

Request bodies for the cart endpoints.
"""
from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    product_id: str = Field(min_length=1)  # slug or id
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int  # 0 or below removes the item
