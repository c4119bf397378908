"""
Durable storage of orders.

The store is the only source of truth for order status and timestamps. Session work
is blocking, so every public method hands it to the threadpool and can be awaited
from the event loop.
"""
import logging
from collections.abc import Collection
from datetime import datetime
from typing import Any, Iterable

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import Engine, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..db.orders import Order, OrderStatus
from ..errors import StoreUnavailable

logger = logging.getLogger(__name__)


class OrderStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    async def insert(self, order: Order) -> Order:
        return await self._run("insert", self._insert, order)

    async def get(self, order_id: int) -> Order | None:
        return await self._run("get", self._get, order_id)

    async def list_orders(
        self,
        statuses: OrderStatus | Iterable[OrderStatus] | None = None,
        completed_since: datetime | None = None,
    ) -> list[Order]:
        return await self._run("list_orders", self._list_orders, statuses, completed_since)

    async def update(
        self,
        order_id: int,
        values: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> bool:
        """
        Update fields of one order in a single statement.

        ``expected`` maps column names to the value the row must currently hold (a
        collection means "one of"). Returns False when no row matched, either because
        the order does not exist or because the condition failed.
        """
        return await self._run("update", self._update, order_id, values, expected or {})

    async def _run(self, operation: str, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except SQLAlchemyError as e:
            logger.error(f"Order store {operation} failed: {e}", exc_info=True)
            raise StoreUnavailable(f"Order store unavailable: {operation} failed") from e

    def _insert(self, order: Order) -> Order:
        with Session(self.engine) as session:
            session.add(order)
            session.commit()
            # Commit expires the instance, so reload it before the session closes
            session.refresh(order)
            return order

    def _get(self, order_id: int) -> Order | None:
        with Session(self.engine) as session:
            return session.get(Order, order_id)

    def _list_orders(self, statuses, completed_since: datetime | None) -> list[Order]:
        query = select(Order)

        if isinstance(statuses, OrderStatus):
            query = query.where(Order.status == statuses)
        elif statuses is not None:
            query = query.where(Order.status.in_(list(statuses)))

        if completed_since is not None:
            query = query.where(
                or_(Order.status != OrderStatus.COMPLETED, Order.completed_at >= completed_since)
            )

        with Session(self.engine) as session:
            return list(session.exec(query.order_by(Order.id)).all())

    def _update(self, order_id: int, values: dict[str, Any], expected: dict[str, Any]) -> bool:
        statement = (
            update(Order)
            .where(Order.id == order_id)
            .execution_options(synchronize_session=False)
        )
        for column_name, value in expected.items():
            column = getattr(Order, column_name)
            if value is None:
                statement = statement.where(column.is_(None))
            elif isinstance(value, Collection) and not isinstance(value, str):
                statement = statement.where(column.in_(list(value)))
            else:
                statement = statement.where(column == value)

        with Session(self.engine) as session:
            result = session.execute(statement.values(**values))
            session.commit()
            return result.rowcount > 0
