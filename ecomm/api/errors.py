import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ecomm.storer.errors import NotFound, OperationCancelled, StorageError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map storer errors to HTTP responses.

    - NotFound -> 404
    - OperationCancelled / DeadlineExceeded -> 504
    - any other StorageError -> 500 with a generic message
    """

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": exc.detail},
        )

    @app.exception_handler(OperationCancelled)
    async def cancelled_handler(request: Request, exc: OperationCancelled):
        logger.warning(f"{request.method} {request.url.path} gave up: {exc}")
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"detail": f"{exc.op} timed out"},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"{exc.op} failed"},
        )
