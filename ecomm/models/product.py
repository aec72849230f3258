from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String, Text

from ecomm.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class ProductRow(Base):
    """
    Table definition for catalog products.

    Attributes:
        id: Generated identifier
        name: Product name
        image: Image reference (URL or path)
        category: Catalog category
        description: Free-form description
        rating: Average rating
        num_reviews: Number of reviews
        price: Unit price
        count_in_stock: Units available
        created_at: Timestamp when product was created
        updated_at: Timestamp of the last update, NULL until the first one
    """
    __tablename__ = "products"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    image = Column(String(255), nullable=False, default="")
    category = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    rating = Column(Integer, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False)
    count_in_stock = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<ProductRow(id={self.id}, name='{self.name}', count_in_stock={self.count_in_stock})>"


products_table = ProductRow.__table__
