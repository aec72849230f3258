from fastapi import APIRouter, Depends, status

from ecomm.api.deps import get_call_context, get_product_service
from ecomm.services.product_service import ProductService
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Product
from ecomm.storer.errors import WriteFailure
from ecomm.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)


def apply_product_update(product: Product, product_data: ProductUpdate) -> Product:
    """
    Merge the fields present in ``product_data`` onto ``product``.

    Presence is decided by the request body, not by the value, so zero and
    empty values are applied like any other. Explicit nulls are ignored.
    """
    update_data = product_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is not None:
            setattr(product, field, value)
    return product


def create_router() -> APIRouter:
    router = APIRouter(prefix="/products", tags=["Products"])

    @router.post(
        "/",
        response_model=ProductResponse,
        status_code=status.HTTP_201_CREATED,
        summary="Create a new product",
        description="Create a new catalog product."
    )
    def create_product(
        product_data: ProductCreate,
        ctx: CallContext = Depends(get_call_context),
        service: ProductService = Depends(get_product_service)
    ):
        """
        Create a new product.

        - **name**: Product name (required)
        - **price**: Unit price, must be non-negative (required)
        - **count_in_stock**: Initial stock, must be non-negative
        """
        return service.create(ctx, Product(**product_data.model_dump()))

    @router.get(
        "/",
        response_model=list[ProductResponse],
        summary="List all products",
        description="Get every product in the catalog."
    )
    def list_products(
        ctx: CallContext = Depends(get_call_context),
        service: ProductService = Depends(get_product_service)
    ):
        return service.list(ctx)

    @router.get(
        "/{product_id}",
        response_model=ProductResponse,
        summary="Get product by ID"
    )
    def get_product(
        product_id: int,
        ctx: CallContext = Depends(get_call_context),
        service: ProductService = Depends(get_product_service)
    ):
        return service.get(ctx, product_id)

    @router.patch(
        "/{product_id}",
        response_model=ProductResponse,
        summary="Update a product",
        description="Update product details. Only fields present in the body are changed."
    )
    def update_product(
        product_id: int,
        product_data: ProductUpdate,
        ctx: CallContext = Depends(get_call_context),
        service: ProductService = Depends(get_product_service)
    ):
        """
        Update a product.

        The current row is read first so the storer can write the full,
        merged row back. A row deleted between the read and the write is
        reported as not found.
        """
        product = service.get(ctx, product_id)
        apply_product_update(product, product_data)
        try:
            return service.update(ctx, product)
        except WriteFailure:
            # Raises NotFound when the row went away after the read
            service.get(ctx, product_id)
            raise

    @router.delete(
        "/{product_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a product",
        description="Delete a product by ID. Deleting a missing product succeeds."
    )
    def delete_product(
        product_id: int,
        ctx: CallContext = Depends(get_call_context),
        service: ProductService = Depends(get_product_service)
    ):
        service.delete(ctx, product_id)
        return None

    return router
