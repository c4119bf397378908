import json
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..db.orders import Order, OrderStatus


class WireModel(BaseModel):
    # Clients speak camelCase, Python code uses snake_case
    # Table numbers and names are opaque, older clients send them as numbers
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )


def encode_items(items: Union[List[Any], str, None]) -> str:
    """Lists are stored as JSON, pre-encoded strings are stored as they are"""
    if items is None:
        return ""
    if isinstance(items, str):
        return items
    return json.dumps(items)


def decode_items(raw: str) -> Union[List[Any], str]:
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return raw
    return decoded if isinstance(decoded, list) else raw


class OrderSubmit(WireModel):
    table_number: str
    waiter_name: str
    items: Union[List[Any], str, None] = Field(
        default=None, validation_alias=AliasChoices("items", "order")
    )
    order_items: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("order_items", "orderItems")
    )

    def encoded_items(self) -> str:
        return encode_items(self.items if self.items is not None else self.order_items)


class StatusUpdate(WireModel):
    order_id: int
    status: OrderStatus


class CompleteRequest(WireModel):
    order_id: int


class OrderOut(WireModel):
    id: int
    table_number: str
    waiter_name: str
    items: Union[List[Any], str]
    status: OrderStatus
    created_at: datetime
    pending_start_time: Optional[datetime] = None
    countdown: Optional[str] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderOut":
        return cls(
            id=order.id,
            table_number=order.table_number,
            waiter_name=order.waiter_name,
            items=decode_items(order.order_items),
            status=order.status,
            created_at=order.created_at,
            pending_start_time=order.pending_start_time,
            countdown=order.countdown,
            completed_at=order.completed_at,
        )


class OrderStatusChanged(WireModel):
    order_id: int
    status: OrderStatus
    pending_start_time: Optional[datetime] = None
    countdown: Optional[str] = None
