"""Abstract storage contract used by the service layer."""

from abc import ABC, abstractmethod
from typing import List

from ecomm.storer.context import CallContext
from ecomm.storer.entities import Order, Product


class Storer(ABC):

    @abstractmethod
    def create_product(self, ctx: CallContext, product: Product) -> Product:
        """Insert a product and return it with its id and creation time set."""

    @abstractmethod
    def get_product(self, ctx: CallContext, product_id: int) -> Product:
        """Return one product. Raises NotFound if no row matches."""

    @abstractmethod
    def list_products(self, ctx: CallContext) -> List[Product]:
        """Return every product in the store's natural order."""

    @abstractmethod
    def update_product(self, ctx: CallContext, product: Product) -> Product:
        """Overwrite the full row keyed by ``product.id``."""

    @abstractmethod
    def delete_product(self, ctx: CallContext, product_id: int) -> None:
        """Delete a product. Deleting a missing product is not an error."""

    @abstractmethod
    def create_order(self, ctx: CallContext, order: Order) -> Order:
        """Insert an order and its items atomically."""

    @abstractmethod
    def get_order(self, ctx: CallContext, order_id: int) -> Order:
        """Return one order with its items. Raises NotFound if no row matches."""

    @abstractmethod
    def list_orders(self, ctx: CallContext) -> List[Order]:
        """Return every order with its items attached."""

    @abstractmethod
    def delete_order(self, ctx: CallContext, order_id: int) -> None:
        """Delete an order and its items atomically."""
