from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class OrderStatus(str, Enum):
    NEW = "new"
    PENDING = "pending"
    COMPLETED = "completed"


# Legal targets for each current status. Completed is terminal.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.NEW: frozenset({OrderStatus.PENDING, OrderStatus.COMPLETED}),
    OrderStatus.PENDING: frozenset({OrderStatus.PENDING, OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
}


def allowed_sources(target: OrderStatus) -> list[OrderStatus]:
    """Statuses from which ``target`` may be entered"""
    return [source for source, targets in ALLOWED_TRANSITIONS.items() if target in targets]


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    table_number: str = Field()
    waiter_name: str = Field()
    order_items: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    status: OrderStatus = Field(default=OrderStatus.NEW)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime, nullable=False))
    pending_start_time: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    countdown: Optional[str] = Field(default=None)
    completed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True, index=True)
    )
