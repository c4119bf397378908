"""
Order lifecycle: new -> pending -> completed.

Contains:
- Order creation (submit)
- Moving an order to pending with a timestamp (set_status)
- Completing an order and computing its countdown (complete)

Each successful mutation is followed by exactly one broadcast. Failed commands raise
an OrderError to the caller and broadcast nothing.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Union

from ..db.orders import ALLOWED_TRANSITIONS, Order, OrderStatus, allowed_sources
from ..errors import InvalidTransition, NotFound, StoreUnavailable, ValidationFailed
from ..schemas.orders import OrderOut, OrderStatusChanged, encode_items
from .broadcaster import ORDER_CREATED, ORDER_STATUS_CHANGED, Broadcaster
from .countdown import elapsed
from .order_store import OrderStore

logger = logging.getLogger(__name__)

SNAPSHOT_STATUSES = (OrderStatus.NEW, OrderStatus.PENDING, OrderStatus.COMPLETED)


def parse_status(value: Union[OrderStatus, str]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationFailed(f"Unknown order status: {value!r}")


class OrderLifecycle:
    def __init__(
        self,
        store: OrderStore,
        broadcaster: Broadcaster,
        clock: Callable[[], datetime] = datetime.now,
        max_complete_attempts: int = 3,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.clock = clock
        self.max_complete_attempts = max_complete_attempts
        # Mutation and its broadcast happen under one lock so events leave in commit order
        self._lock = asyncio.Lock()

    async def submit(
        self, table_number: str, waiter_name: str, items: Union[List[Any], str, None]
    ) -> Order:
        if not table_number or not waiter_name:
            raise ValidationFailed("tableNumber and waiterName are required")

        async with self._lock:
            order = await self.store.insert(
                Order(
                    table_number=table_number,
                    waiter_name=waiter_name,
                    order_items=encode_items(items),
                    status=OrderStatus.NEW,
                    created_at=self.clock(),
                )
            )
            logger.info(f"Order {order.id} created for table {order.table_number} by {order.waiter_name}")
            await self.broadcaster.broadcast(
                ORDER_CREATED, OrderOut.from_order(order).model_dump(mode="json", by_alias=True)
            )
        return order

    async def set_status(self, order_id: int, status: Union[OrderStatus, str]) -> OrderStatusChanged:
        """Non-terminal transition. Entering pending restamps pending_start_time."""
        new_status = parse_status(status)
        if new_status == OrderStatus.COMPLETED:
            raise ValidationFailed("Use complete() to finish an order")

        async with self._lock:
            values: dict[str, Any] = {"status": new_status}
            pending_start_time = None
            if new_status == OrderStatus.PENDING:
                pending_start_time = self.clock()
                values["pending_start_time"] = pending_start_time

            updated = await self.store.update(
                order_id, values, expected={"status": allowed_sources(new_status)}
            )
            if not updated:
                await self._raise_rejected(order_id, new_status)

            event = OrderStatusChanged(
                order_id=order_id, status=new_status, pending_start_time=pending_start_time
            )
            logger.info(f"Order {order_id} is now {new_status.value}")
            await self._emit_status(event)
        return event

    async def complete(self, order_id: int) -> OrderStatusChanged:
        """
        Terminal transition.

        The countdown is computed from the persisted pending_start_time. The write is
        conditional on the status and pending_start_time that were read, so a
        concurrent restamp makes it retry instead of storing a stale countdown.
        """
        async with self._lock:
            for attempt in range(1, self.max_complete_attempts + 1):
                order = await self.store.get(order_id)
                if order is None:
                    raise NotFound(f"Order {order_id} not found")
                if OrderStatus.COMPLETED not in ALLOWED_TRANSITIONS[order.status]:
                    raise InvalidTransition(f"Order {order_id} is already {order.status.value}")

                completed_at = self.clock()
                countdown = None
                if order.pending_start_time is not None:
                    countdown = elapsed(order.pending_start_time, completed_at)

                updated = await self.store.update(
                    order_id,
                    {"status": OrderStatus.COMPLETED, "countdown": countdown, "completed_at": completed_at},
                    expected={"status": order.status, "pending_start_time": order.pending_start_time},
                )
                if updated:
                    event = OrderStatusChanged(
                        order_id=order_id, status=OrderStatus.COMPLETED, countdown=countdown
                    )
                    logger.info(f"Order {order_id} completed, countdown {countdown}")
                    await self._emit_status(event)
                    return event

                logger.warning(f"Order {order_id} changed while completing, attempt {attempt}")

        raise StoreUnavailable(f"Order {order_id} kept changing, could not complete it")

    async def list_pending(self) -> list[Order]:
        return await self.store.list_orders(OrderStatus.PENDING)

    async def snapshot(self, retention_minutes: int | None = None) -> list[dict]:
        """Current orders for a newly connected observer, camelCase and JSON-ready"""
        async with self._lock:
            return await self._read_snapshot(retention_minutes)

    async def send_snapshot(self, key: str, retention_minutes: int | None = None):
        """
        Deliver the snapshot to one observer.

        Reading and sending happen under the mutation lock, so no status change can
        reach the observer ahead of the older snapshot it would then overwrite.
        """
        async with self._lock:
            orders = await self._read_snapshot(retention_minutes)
            await self.broadcaster.send_snapshot(key, orders)

    async def _read_snapshot(self, retention_minutes: int | None) -> list[dict]:
        completed_since = None
        if retention_minutes is not None:
            completed_since = self.clock() - timedelta(minutes=retention_minutes)
        orders = await self.store.list_orders(SNAPSHOT_STATUSES, completed_since=completed_since)
        return [OrderOut.from_order(order).model_dump(mode="json", by_alias=True) for order in orders]

    async def _raise_rejected(self, order_id: int, new_status: OrderStatus):
        order = await self.store.get(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        raise InvalidTransition(
            f"Cannot transition order {order_id} from {order.status.value} to {new_status.value}"
        )

    async def _emit_status(self, event: OrderStatusChanged):
        await self.broadcaster.broadcast(
            ORDER_STATUS_CHANGED, event.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
