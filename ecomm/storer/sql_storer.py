from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Tuple, TypeVar
import logging

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ecomm.models.order import order_items_table, orders_table
from ecomm.models.product import products_table
from ecomm.storer.base import Storer
from ecomm.storer.context import CallContext
from ecomm.storer.entities import Order, OrderItem, Product
from ecomm.storer.errors import (
    CompoundFailure,
    IdentityFailure,
    NotFound,
    OperationCancelled,
    ReadFailure,
    StorageError,
    TransactionFailure,
    WriteFailure,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRODUCT_FIELDS = (
    "name",
    "image",
    "category",
    "description",
    "rating",
    "num_reviews",
    "price",
    "count_in_stock",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _product_values(product: Product) -> dict:
    return {name: getattr(product, name) for name in PRODUCT_FIELDS}


class SQLStorer(Storer):
    """
    Relational storer for products and orders.

    Product operations are single statements. Order writes touch the
    ``orders`` and ``order_items`` tables together and always run through
    ``_exec_tx`` so they either fully apply or leave no trace.

    TRANSACTION HANDLING:
    =====================
    1. Open a session from the pooled session factory
    2. Begin a transaction and push the call deadline to the server
    3. Run the unit of work, checking the call context between statements
    4. Commit, or roll back on any exception and re-raise the original
    5. Close the session on every exit path

    A failed commit raises TransactionFailure, for product writes as well.
    If the rollback itself fails, a CompoundFailure carrying both errors is
    raised, original error first. Cancelling the call context aborts the
    statement currently running on the session's connection.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # --- Products -------------------------------------------------------------

    def create_product(self, ctx: CallContext, product: Product) -> Product:
        op = "create product"
        created_at = _utcnow()
        values = _product_values(product)
        values["created_at"] = created_at

        with self._session(ctx, op) as session:
            try:
                result = session.execute(insert(products_table).values(**values))
            except SQLAlchemyError as e:
                logger.error(f"Error inserting product: {e}")
                raise WriteFailure(op, "error inserting product", e) from e
            product_id = self._inserted_id(op, result, "product")
            ctx.raise_if_done(op)
            self._commit(session, op)

        product.id = product_id
        product.created_at = created_at
        logger.info(f"Product #{product_id} created")
        return product

    def get_product(self, ctx: CallContext, product_id: int) -> Product:
        op = "get product"
        with self._session(ctx, op) as session:
            try:
                row = session.execute(
                    select(products_table).where(products_table.c.id == product_id)
                ).mappings().one()
            except NoResultFound as e:
                raise NotFound(op, f"product {product_id} not found", e) from e
            except SQLAlchemyError as e:
                logger.error(f"Error getting product #{product_id}: {e}")
                raise ReadFailure(op, "error getting product", e) from e
        return Product(**row)

    def list_products(self, ctx: CallContext) -> List[Product]:
        op = "list products"
        with self._session(ctx, op) as session:
            try:
                rows = session.execute(select(products_table)).mappings().all()
            except SQLAlchemyError as e:
                logger.error(f"Error listing products: {e}")
                raise ReadFailure(op, "error listing products", e) from e
        return [Product(**row) for row in rows]

    def update_product(self, ctx: CallContext, product: Product) -> Product:
        op = "update product"
        updated_at = _utcnow()
        values = _product_values(product)
        values["updated_at"] = updated_at

        with self._session(ctx, op) as session:
            try:
                result = session.execute(
                    update(products_table)
                    .where(products_table.c.id == product.id)
                    .values(**values)
                )
            except SQLAlchemyError as e:
                logger.error(f"Error updating product #{product.id}: {e}")
                raise WriteFailure(op, "error updating product", e) from e
            if result.rowcount == 0:
                raise WriteFailure(op, f"no product with id {product.id}")
            ctx.raise_if_done(op)
            self._commit(session, op)

        product.updated_at = updated_at
        return product

    def delete_product(self, ctx: CallContext, product_id: int) -> None:
        op = "delete product"
        with self._session(ctx, op) as session:
            try:
                session.execute(
                    delete(products_table).where(products_table.c.id == product_id)
                )
            except SQLAlchemyError as e:
                logger.error(f"Error deleting product #{product_id}: {e}")
                raise WriteFailure(op, "error deleting product", e) from e
            ctx.raise_if_done(op)
            self._commit(session, op)

    # --- Orders ---------------------------------------------------------------

    def create_order(self, ctx: CallContext, order: Order) -> Order:
        """
        Insert the order header and then each item, in one transaction.

        Generated ids are written back onto ``order`` and its items only
        after commit, so a failed call leaves the caller's object as it was.

        Raises:
            WriteFailure: If the header or an item insert is rejected
            IdentityFailure: If a generated id cannot be read back
            CompoundFailure: If the rollback after either of those fails
            TransactionFailure: If the commit fails
            OperationCancelled: If the call context is cancelled or expires
        """
        op = "create order"
        created_at = _utcnow()

        def work(session: Session) -> Tuple[int, List[int]]:
            order_id = self._insert_order(session, op, order, created_at)
            item_ids = []
            for item in order.items:
                ctx.raise_if_done(op)
                item_ids.append(self._insert_order_item(session, op, item, order_id))
            return order_id, item_ids

        order_id, item_ids = self._exec_tx(ctx, op, work)

        order.id = order_id
        order.created_at = created_at
        for item, item_id in zip(order.items, item_ids):
            item.id = item_id
            item.order_id = order_id

        logger.info(f"Order #{order_id} created with {len(item_ids)} item(s)")
        return order

    def get_order(self, ctx: CallContext, order_id: int) -> Order:
        op = "get order"
        with self._session(ctx, op) as session:
            try:
                row = session.execute(
                    select(orders_table).where(orders_table.c.id == order_id)
                ).mappings().one()
            except NoResultFound as e:
                raise NotFound(op, f"order {order_id} not found", e) from e
            except SQLAlchemyError as e:
                logger.error(f"Error getting order #{order_id}: {e}")
                raise ReadFailure(op, "error getting order", e) from e
            ctx.raise_if_done(op)
            items = self._select_items(session, op, [order_id])

        order = Order(**row)
        order.items = items.get(order_id, [])
        return order

    def list_orders(self, ctx: CallContext) -> List[Order]:
        op = "list orders"
        with self._session(ctx, op) as session:
            try:
                rows = session.execute(select(orders_table)).mappings().all()
            except SQLAlchemyError as e:
                logger.error(f"Error listing orders: {e}")
                raise ReadFailure(op, "error listing orders", e) from e
            if not rows:
                return []
            ctx.raise_if_done(op)
            # One batched lookup instead of one query per order
            items = self._select_items(session, op, [row["id"] for row in rows])

        orders = []
        for row in rows:
            order = Order(**row)
            order.items = items.get(order.id, [])
            orders.append(order)
        return orders

    def delete_order(self, ctx: CallContext, order_id: int) -> None:
        op = "delete order"

        def work(session: Session) -> None:
            try:
                session.execute(
                    delete(order_items_table).where(order_items_table.c.order_id == order_id)
                )
            except SQLAlchemyError as e:
                logger.error(f"Error deleting items of order #{order_id}: {e}")
                raise WriteFailure(op, "error deleting order items", e) from e
            ctx.raise_if_done(op)
            try:
                session.execute(delete(orders_table).where(orders_table.c.id == order_id))
            except SQLAlchemyError as e:
                logger.error(f"Error deleting order #{order_id}: {e}")
                raise WriteFailure(op, "error deleting order", e) from e

        self._exec_tx(ctx, op, work)
        logger.info(f"Order #{order_id} deleted")

    def _insert_order(
        self, session: Session, op: str, order: Order, created_at: datetime
    ) -> int:
        try:
            result = session.execute(
                insert(orders_table).values(
                    payment_method=order.payment_method,
                    tax_price=order.tax_price,
                    shipping_price=order.shipping_price,
                    total_price=order.total_price,
                    created_at=created_at,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Error inserting order: {e}")
            raise WriteFailure(op, "error inserting order", e) from e
        return self._inserted_id(op, result, "order")

    def _insert_order_item(
        self, session: Session, op: str, item: OrderItem, order_id: int
    ) -> int:
        try:
            result = session.execute(
                insert(order_items_table).values(
                    name=item.name,
                    quantity=item.quantity,
                    image=item.image,
                    price=item.price,
                    product_id=item.product_id,
                    order_id=order_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Error inserting item for order #{order_id}: {e}")
            raise WriteFailure(op, "error inserting order item", e) from e
        return self._inserted_id(op, result, "order item")

    def _select_items(
        self, session: Session, op: str, order_ids: List[int]
    ) -> Dict[int, List[OrderItem]]:
        try:
            rows = session.execute(
                select(order_items_table)
                .where(order_items_table.c.order_id.in_(order_ids))
                .order_by(order_items_table.c.id)
            ).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting order items: {e}")
            raise ReadFailure(op, "error getting order items", e) from e

        grouped = defaultdict(list)
        for row in rows:
            grouped[row["order_id"]].append(OrderItem(**row))
        return grouped

    # --- Session and transaction plumbing --------------------------------------

    @contextmanager
    def _session(self, ctx: CallContext, op: str) -> Iterator[Session]:
        """Session outside an explicit transaction. Closing it rolls back anything uncommitted."""
        ctx.raise_if_done(op)
        session = self._session_factory()
        try:
            self._apply_deadline(session, ctx, op)
            with self._interruptible(session, ctx, op):
                yield session
        finally:
            session.close()

    def _exec_tx(self, ctx: CallContext, op: str, work: Callable[[Session], T]) -> T:
        """
        Run ``work`` inside one transaction.

        Commits when ``work`` returns. On any exception, including
        cancellation and interrupts, rolls back before re-raising the
        original error.
        """
        ctx.raise_if_done(op)
        session = self._session_factory()
        try:
            try:
                session.begin()
                self._apply_deadline(session, ctx, op)
            except SQLAlchemyError as e:
                logger.error(f"Error beginning transaction for {op}: {e}")
                raise TransactionFailure(op, "error beginning transaction", e) from e

            try:
                with self._interruptible(session, ctx, op):
                    result = work(session)
                ctx.raise_if_done(op)
            except BaseException as e:
                self._rollback(session, op, e)
                raise

            self._commit(session, op)
            return result
        finally:
            session.close()

    @contextmanager
    def _interruptible(self, session: Session, ctx: CallContext, op: str) -> Iterator[None]:
        """
        Abort the statement running on ``session`` when ``ctx`` is cancelled.

        psycopg2 connections expose ``cancel()``, sqlite3 ones ``interrupt()``;
        both are safe to call from the cancelling thread. A driver error
        raised because of the cancel surfaces as OperationCancelled.
        """
        try:
            dbapi_connection = session.connection().connection.dbapi_connection
        except SQLAlchemyError as e:
            logger.error(f"Error acquiring connection for {op}: {e}")
            raise TransactionFailure(op, "error acquiring connection", e) from e
        abort = getattr(dbapi_connection, "cancel", None) or getattr(dbapi_connection, "interrupt", None)

        if abort is not None:
            ctx.add_cancel_callback(abort)
        try:
            yield
        except (StorageError, SQLAlchemyError) as e:
            if ctx.cancelled and not isinstance(e, OperationCancelled):
                raise OperationCancelled(op, "call was cancelled", e) from e
            raise
        finally:
            if abort is not None:
                ctx.remove_cancel_callback(abort)

    def _rollback(self, session: Session, op: str, original: BaseException) -> None:
        try:
            session.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback failed for {op} after '{original}': {rollback_error}")
            raise CompoundFailure(op, original, rollback_error) from original

    def _commit(self, session: Session, op: str) -> None:
        try:
            session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction for {op}: {e}")
            raise TransactionFailure(op, "error committing transaction", e) from e

    @staticmethod
    def _apply_deadline(session: Session, ctx: CallContext, op: str) -> None:
        # PostgreSQL aborts the running statement itself once the deadline passes
        remaining = ctx.remaining()
        if remaining is None or session.get_bind().dialect.name != "postgresql":
            return
        timeout_ms = max(1, int(remaining * 1000))
        try:
            session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
        except SQLAlchemyError as e:
            raise TransactionFailure(op, "error applying statement timeout", e) from e

    @staticmethod
    def _inserted_id(op: str, result: CursorResult, what: str) -> int:
        try:
            primary_key = result.inserted_primary_key
        except SQLAlchemyError as e:
            logger.error(f"Error getting generated id for {what}: {e}")
            raise IdentityFailure(op, f"error getting generated id for {what}", e) from e
        if not primary_key or primary_key[0] is None:
            raise IdentityFailure(op, f"no generated id returned for {what}")
        return int(primary_key[0])
