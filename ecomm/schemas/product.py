from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    image: str = Field("", max_length=255, description="Image reference")
    category: str = Field("", max_length=255, description="Catalog category")
    description: str = Field("", description="Product description")
    rating: int = Field(0, ge=0, description="Average rating")
    num_reviews: int = Field(0, ge=0, description="Number of reviews")
    price: float = Field(..., ge=0, description="Unit price (must be non-negative)")
    count_in_stock: int = Field(0, ge=0, description="Units in stock (must be non-negative)")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """
    Schema for updating an existing product. All fields are optional.

    Only fields present in the request body are applied, so sending
    ``"price": 0`` sets the price to zero.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    image: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    rating: Optional[int] = Field(None, ge=0)
    num_reviews: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    count_in_stock: Optional[int] = Field(None, ge=0)


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
