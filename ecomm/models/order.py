from sqlalchemy import BigInteger, Column, DateTime, Float, ForeignKey, Integer, String

from ecomm.database import Base
from ecomm.models.product import BigIntId


class OrderRow(Base):
    """
    Table definition for order headers.

    Attributes:
        id: Generated identifier
        payment_method: How the order was paid
        tax_price: Tax charged
        shipping_price: Shipping charged
        total_price: Grand total
        created_at: Timestamp when order was created
        updated_at: Timestamp of the last update, NULL for orders
    """
    __tablename__ = "orders"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    payment_method = Column(String(64), nullable=False)
    tax_price = Column(Float, nullable=False, default=0.0)
    shipping_price = Column(Float, nullable=False, default=0.0)
    total_price = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<OrderRow(id={self.id}, total_price={self.total_price})>"


class OrderItemRow(Base):
    """Table definition for order line items. Every row references its order."""
    __tablename__ = "order_items"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    image = Column(String(255), nullable=False, default="")
    price = Column(Float, nullable=False)
    product_id = Column(BigInteger, ForeignKey("products.id"), nullable=False, index=True)
    order_id = Column(BigInteger, ForeignKey("orders.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<OrderItemRow(id={self.id}, order_id={self.order_id}, product_id={self.product_id})>"


orders_table = OrderRow.__table__
order_items_table = OrderItemRow.__table__
