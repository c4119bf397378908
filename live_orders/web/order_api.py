"""
Read-only HTTP API for orders.

Mutations go through the WebSocket so that every change is broadcast; these endpoints
only expose the stored state.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from live_orders.db.orders import OrderStatus
from live_orders.dependencies import LifecycleDep
from live_orders.errors import StoreUnavailable
from live_orders.schemas.orders import OrderOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/orders", response_model=List[OrderOut], response_model_by_alias=True)
async def list_orders(lifecycle: LifecycleDep, status: Optional[OrderStatus] = None):
    try:
        orders = await lifecycle.store.list_orders(status)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    return [OrderOut.from_order(order) for order in orders]


@router.get("/orders/pending", response_model=List[OrderOut], response_model_by_alias=True)
async def list_pending_orders(lifecycle: LifecycleDep):
    try:
        orders = await lifecycle.list_pending()
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    return [OrderOut.from_order(order) for order in orders]


@router.get("/orders/{order_id}", response_model=OrderOut, response_model_by_alias=True)
async def get_order(order_id: int, lifecycle: LifecycleDep):
    try:
        order = await lifecycle.store.get(order_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderOut.from_order(order)
