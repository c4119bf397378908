"""
WebSocket endpoint for live order synchronization.

Frames are JSON objects ``{"event": ..., "data": ..., "ack": ...}``. Every command
gets exactly one ``{"event": "ack", "ack": ..., "data": {"success": ...}}`` reply,
sent to the issuing client only. State changes reach every client through the
broadcaster.
"""
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlmodel import Session

from live_orders.db.orders import OrderStatus
from live_orders.errors import OrderError, StoreUnavailable, ValidationFailed
from live_orders.schemas.orders import CompleteRequest, OrderOut, OrderSubmit, StatusUpdate
from live_orders.schemas.waiter import PasskeyCheck
from live_orders.services.lifecycle import OrderLifecycle
from live_orders.services.waiter_directory import first_waiter, verify_passkey

logger = logging.getLogger(__name__)
router = APIRouter()


def _wrap_scalar(data: Any, key: str) -> Any:
    # Older clients send the bare value instead of an object
    if isinstance(data, dict):
        return data
    return {key: data}


class CommandHandler:
    def __init__(self, websocket: WebSocket):
        state = websocket.app.state
        self.lifecycle: OrderLifecycle = state.lifecycle
        self.engine = state.engine

    async def submit_order(self, data: Any) -> dict:
        payload = OrderSubmit.model_validate(data)
        order = await self.lifecycle.submit(
            payload.table_number, payload.waiter_name, payload.encoded_items()
        )
        return {"success": True, "orderId": order.id}

    async def update_status(self, data: Any) -> dict:
        payload = StatusUpdate.model_validate(data)
        if payload.status == OrderStatus.COMPLETED:
            return await self.complete_order(payload.order_id)
        await self.lifecycle.set_status(payload.order_id, payload.status)
        return {"success": True}

    async def complete_order(self, data: Any) -> dict:
        payload = CompleteRequest.model_validate(_wrap_scalar(data, "orderId"))
        await self.lifecycle.complete(payload.order_id)
        return {"success": True, "message": "Order completed successfully"}

    async def verify_passkey(self, data: Any) -> dict:
        payload = PasskeyCheck.model_validate(_wrap_scalar(data, "passkey"))
        waiter = await run_in_threadpool(self._find_waiter, payload.passkey)
        if waiter is None:
            logger.info("Invalid passkey")
            return {"success": False, "message": "Invalid passkey"}
        logger.info(f"Passkey verified for waiter: {waiter.waiter_name}")
        return {"success": True, "waiterName": waiter.waiter_name}

    async def list_pending_orders(self, data: Any) -> dict:
        orders = await self.lifecycle.list_pending()
        return {
            "success": True,
            "orders": [OrderOut.from_order(order).model_dump(mode="json", by_alias=True) for order in orders],
        }

    async def get_waiter_info(self, data: Any) -> dict:
        waiter = await run_in_threadpool(self._first_waiter)
        return {"success": True, "waiterName": waiter.waiter_name if waiter else ""}

    def _find_waiter(self, passkey: str):
        with Session(self.engine) as session:
            return verify_passkey(session, passkey)

    def _first_waiter(self):
        with Session(self.engine) as session:
            return first_waiter(session)

    async def dispatch(self, event: str, data: Any) -> dict:
        handlers = {
            "submitOrder": self.submit_order,
            "updateStatus": self.update_status,
            "completeOrder": self.complete_order,
            "verifyPasskey": self.verify_passkey,
            "listPendingOrders": self.list_pending_orders,
            "getWaiterInfo": self.get_waiter_info,
        }
        handler = handlers.get(event)
        try:
            if handler is None:
                raise ValidationFailed(f"Unknown event: {event!r}")
            return await handler(data)
        except ValidationError as e:
            return _failure(ValidationFailed(f"Invalid {event} payload: {e.error_count()} error(s)"))
        except OrderError as e:
            if isinstance(e, StoreUnavailable):
                logger.error(f"{event} failed: {e.message}")
            return _failure(e)
        except Exception as e:
            # Anything below the store is reported as unavailable, never broadcast
            logger.error(f"Unexpected error handling {event}: {e}", exc_info=True)
            return _failure(StoreUnavailable(f"Error handling {event}"))


def _failure(error: OrderError) -> dict:
    return {"success": False, "message": error.message, "error": error.kind}


def _parse_frame(text: str) -> tuple[str, Any, Any]:
    try:
        frame = json.loads(text)
    except ValueError:
        raise ValidationFailed("Frame is not valid JSON")
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        raise ValidationFailed("Frame must be an object with an 'event' name")
    data = frame.get("data")
    return frame["event"], {} if data is None else data, frame.get("ack")


@router.websocket("/ws")
async def sync_endpoint(websocket: WebSocket):
    await websocket.accept()
    state = websocket.app.state
    broadcaster = state.broadcaster
    handler = CommandHandler(websocket)

    key = broadcaster.connect(websocket)
    try:
        try:
            await state.lifecycle.send_snapshot(key, state.settings.snapshot_retention_minutes)
        except OrderError as e:
            logger.error(f"Error fetching existing orders: {e.message}")

        # A dropped observer has its socket closed by the broadcaster
        while key in broadcaster:
            text = await websocket.receive_text()
            if key not in broadcaster:
                break
            try:
                event, data, ack = _parse_frame(text)
            except ValidationFailed as e:
                await websocket.send_json({"event": "ack", "ack": None, "data": _failure(e)})
                continue

            result = await handler.dispatch(event, data)
            await websocket.send_json({"event": "ack", "ack": ack, "data": result})
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(key)
