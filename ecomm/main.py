from contextlib import asynccontextmanager
from typing import Optional
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from ecomm.config import Settings, get_settings
from ecomm.database import Base, build_engine, build_session_factory
from ecomm.api import health, orders, products
from ecomm.api.errors import register_exception_handlers
from ecomm.services.order_service import OrderService
from ecomm.services.product_service import ProductService
from ecomm.storer.sql_storer import SQLStorer

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the application and everything it owns.

    The engine, storer, services and routers are created here and attached
    to this app instance only, so several apps can coexist (e.g. in tests).
    """
    settings = settings or get_settings()
    engine = engine or build_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )
    storer = SQLStorer(build_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for startup and shutdown events.
        """
        # Startup
        logger.info("Starting up application...")

        # Create database tables
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        yield

        # Shutdown
        logger.info("Shutting down application...")
        in_flight = list(app.state.active_calls)
        if in_flight:
            logger.info(f"Cancelling {len(in_flight)} in-flight call(s)")
        for ctx in in_flight:
            ctx.cancel()

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
        Catalog and order API backed by a relational store.

        - **Product Management**: Full CRUD operations for products
        - **Order Management**: Create, read and delete orders with line items

        ## Atomic orders
        An order header and its items are written in a single transaction.
        A rejected item rolls back the whole order, so no partial order is
        ever visible. Deleting an order removes its items and header together.
        """,
        version=settings.APP_VERSION,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.storer = storer
    app.state.product_service = ProductService(storer)
    app.state.order_service = OrderService(storer)
    app.state.active_calls = set()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routers
    app.include_router(health.create_router(), prefix="/api/v1")
    app.include_router(products.create_router(), prefix="/api/v1")
    app.include_router(orders.create_router(), prefix="/api/v1")

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/api/v1/health"
        }

    return app


def serve(app: FastAPI, settings: Settings) -> None:
    """Run the given app with uvicorn until interrupted."""
    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


def run() -> None:
    settings = get_settings()
    configure_logging(settings)
    serve(create_app(settings), settings)


if __name__ == "__main__":
    run()
