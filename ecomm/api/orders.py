from fastapi import APIRouter, Depends, status

from ecomm.api.deps import get_call_context, get_order_service
from ecomm.services.order_service import OrderService
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Order, OrderItem
from ecomm.schemas.order import OrderCreate, OrderResponse


def to_order(order_data: OrderCreate) -> Order:
    return Order(
        payment_method=order_data.payment_method,
        tax_price=order_data.tax_price,
        shipping_price=order_data.shipping_price,
        total_price=order_data.total_price,
        items=[OrderItem(**item.model_dump()) for item in order_data.items],
    )


def create_router() -> APIRouter:
    router = APIRouter(prefix="/orders", tags=["Orders"])

    @router.post(
        "/",
        response_model=OrderResponse,
        status_code=status.HTTP_201_CREATED,
        summary="Create a new order",
        description="""
        Create an order together with its line items.

        The order header and every item are written in one transaction.
        If any item is rejected (for example it references a product that
        does not exist) nothing is stored.
        """
    )
    def create_order(
        order_data: OrderCreate,
        ctx: CallContext = Depends(get_call_context),
        service: OrderService = Depends(get_order_service)
    ):
        return service.create(ctx, to_order(order_data))

    @router.get(
        "/",
        response_model=list[OrderResponse],
        summary="List all orders",
        description="Get every order with its items."
    )
    def list_orders(
        ctx: CallContext = Depends(get_call_context),
        service: OrderService = Depends(get_order_service)
    ):
        return service.list(ctx)

    @router.get(
        "/{order_id}",
        response_model=OrderResponse,
        summary="Get order by ID"
    )
    def get_order(
        order_id: int,
        ctx: CallContext = Depends(get_call_context),
        service: OrderService = Depends(get_order_service)
    ):
        return service.get(ctx, order_id)

    @router.delete(
        "/{order_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete an order",
        description="Delete an order and all of its items in one transaction."
    )
    def delete_order(
        order_id: int,
        ctx: CallContext = Depends(get_call_context),
        service: OrderService = Depends(get_order_service)
    ):
        service.delete(ctx, order_id)
        return None

    return router
