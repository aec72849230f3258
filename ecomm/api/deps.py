from typing import Iterator

from fastapi import Request

from ecomm.services.order_service import OrderService
from ecomm.services.product_service import ProductService
from ecomm.storer.context import CallContext


def get_call_context(request: Request) -> Iterator[CallContext]:
    """
    Fresh call context per request, bounded by the configured timeout.

    The context stays in ``app.state.active_calls`` while the request runs,
    so shutdown can cancel it.
    """
    settings = request.app.state.settings
    active_calls = request.app.state.active_calls
    ctx = CallContext(timeout=settings.REQUEST_TIMEOUT_SECONDS)
    active_calls.add(ctx)
    try:
        yield ctx
    finally:
        active_calls.discard(ctx)


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service
