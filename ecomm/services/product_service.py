from typing import List

from ecomm.storer.base import Storer
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Product


class ProductService:
    """
    Service class for Product operations.

    Forwards every call to the storer unchanged. It exists so the API layer
    depends on this class rather than on a concrete storage backend.
    """

    def __init__(self, storer: Storer):
        self.storer = storer

    def create(self, ctx: CallContext, product: Product) -> Product:
        return self.storer.create_product(ctx, product)

    def get(self, ctx: CallContext, product_id: int) -> Product:
        return self.storer.get_product(ctx, product_id)

    def list(self, ctx: CallContext) -> List[Product]:
        return self.storer.list_products(ctx)

    def update(self, ctx: CallContext, product: Product) -> Product:
        return self.storer.update_product(ctx, product)

    def delete(self, ctx: CallContext, product_id: int) -> None:
        self.storer.delete_product(ctx, product_id)
