from typing import List

from ecomm.storer.base import Storer
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Order


class OrderService:
    """Service class for Order operations. A pass-through to the storer."""

    def __init__(self, storer: Storer):
        self.storer = storer

    def create(self, ctx: CallContext, order: Order) -> Order:
        return self.storer.create_order(ctx, order)

    def get(self, ctx: CallContext, order_id: int) -> Order:
        return self.storer.get_order(ctx, order_id)

    def list(self, ctx: CallContext) -> List[Order]:
        return self.storer.list_orders(ctx)

    def delete(self, ctx: CallContext, order_id: int) -> None:
        self.storer.delete_order(ctx, order_id)
