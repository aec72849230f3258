from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class OrderItemCreate(BaseModel):
    """Schema for one line item of a new order."""
    name: str = Field(..., min_length=1, max_length=255, description="Item name")
    quantity: int = Field(default=1, ge=1, description="Quantity ordered")
    image: str = Field("", max_length=255, description="Image reference")
    price: float = Field(..., ge=0, description="Unit price")
    product_id: int = Field(..., description="ID of the ordered product")


class OrderCreate(BaseModel):
    """Schema for creating a new order with its items."""
    payment_method: str = Field(..., min_length=1, max_length=64)
    tax_price: float = Field(0.0, ge=0)
    shipping_price: float = Field(0.0, ge=0)
    total_price: float = Field(0.0, ge=0)
    items: list[OrderItemCreate] = Field(default_factory=list)


class OrderItemResponse(BaseModel):
    """Schema for order item response."""
    id: int
    name: str
    quantity: int
    image: str
    price: float
    product_id: int
    order_id: int

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response including its items."""
    id: int
    payment_method: str
    tax_price: float
    shipping_price: float
    total_price: float
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)
