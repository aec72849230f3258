"""Tests for the service facade against a fake storer."""
import pytest

from fakes import FakeStorer

from ecomm.services.order_service import OrderService
from ecomm.services.product_service import ProductService
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Order, OrderItem, Product
from ecomm.storer.errors import NotFound


@pytest.fixture
def fake_storer():
    return FakeStorer()


class TestProductService:

    def test_forwards_every_operation(self, fake_storer):
        service = ProductService(fake_storer)
        ctx = CallContext()

        product = service.create(ctx, Product(name="Widget", price=9.99))
        assert service.get(ctx, product.id) is product
        assert service.list(ctx) == [product]
        product.price = 0.0
        assert service.update(ctx, product) is product
        service.delete(ctx, product.id)

        assert [name for name, _ in fake_storer.calls] == [
            "create_product",
            "get_product",
            "list_products",
            "update_product",
            "delete_product",
        ]
        assert all(passed is ctx for _, passed in fake_storer.calls)

    def test_propagates_storer_errors_unchanged(self, fake_storer):
        service = ProductService(fake_storer)

        with pytest.raises(NotFound) as exc_info:
            service.get(CallContext(), 42)

        assert exc_info.value.op == "get product"


class TestOrderService:

    def test_forwards_every_operation(self, fake_storer):
        service = OrderService(fake_storer)
        ctx = CallContext()
        order = Order(
            payment_method="card",
            items=[OrderItem(name="Widget", quantity=2, price=9.99, product_id=1)],
        )

        created = service.create(ctx, order)
        assert created is order
        assert created.items[0].order_id == created.id
        assert service.get(ctx, created.id) is created
        assert service.list(ctx) == [created]
        service.delete(ctx, created.id)

        assert [name for name, _ in fake_storer.calls] == [
            "create_order",
            "get_order",
            "list_orders",
            "delete_order",
        ]
        with pytest.raises(NotFound):
            service.get(ctx, created.id)
