"""Plain records moved between the storer and its callers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Product:
    name: str
    image: str = ""
    category: str = ""
    description: str = ""
    rating: int = 0
    num_reviews: int = 0
    price: float = 0.0
    count_in_stock: int = 0
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderItem:
    name: str
    quantity: int
    price: float
    product_id: int
    image: str = ""
    id: Optional[int] = None
    # Set by the storer when the parent order is inserted
    order_id: Optional[int] = None


@dataclass
class Order:
    payment_method: str
    tax_price: float = 0.0
    shipping_price: float = 0.0
    total_price: float = 0.0
    items: List[OrderItem] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
