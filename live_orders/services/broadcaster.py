"""
Fan-out of order events to connected observers.

An observer is anything with an async ``send_json`` method, normally a WebSocket.
Membership lives only as long as the connection: nothing here is persisted, a
reconnecting client rebuilds its view from the snapshot.
"""
import logging
import uuid
from typing import Any, Iterable, Protocol

logger = logging.getLogger(__name__)

ORDER_CREATED = "orderCreated"
ORDER_STATUS_CHANGED = "orderStatusChanged"
ORDERS_SNAPSHOT = "ordersSnapshot"


class Observer(Protocol):
    async def send_json(self, data: Any) -> None: ...


class Broadcaster:
    def __init__(self):
        self._observers: dict[str, Observer] = {}

    def __len__(self) -> int:
        return len(self._observers)

    def __contains__(self, key: str) -> bool:
        return key in self._observers

    def connect(self, observer: Observer) -> str:
        key = uuid.uuid4().hex
        self._observers[key] = observer
        logger.info(f"Observer {key} connected, {len(self._observers)} connected")
        return key

    def disconnect(self, key: str):
        if self._observers.pop(key, None) is not None:
            logger.info(f"Observer {key} disconnected, {len(self._observers)} connected")

    async def send_snapshot(self, key: str, orders: Iterable[dict]):
        """Send the full current state to one observer only"""
        observer = self._observers.get(key)
        if observer is None:
            return
        await self._deliver(key, observer, {"event": ORDERS_SNAPSHOT, "data": list(orders)})

    async def broadcast(self, event: str, payload: dict):
        """
        Send an event to every connected observer, the originator included.

        Delivery is best effort: an observer that fails to receive is dropped and the
        remaining observers still get the event.
        """
        message = {"event": event, "data": payload}
        # Copy, observers may disconnect while we are awaiting sends
        for key, observer in list(self._observers.items()):
            await self._deliver(key, observer, message)

    async def _deliver(self, key: str, observer: Observer, message: dict):
        try:
            await observer.send_json(message)
        except Exception as e:
            logger.warning(f"Dropping observer {key} after failed {message['event']} delivery: {e}")
            self.disconnect(key)
            await self._close(key, observer)

    async def _close(self, key: str, observer: Observer):
        # Closing tells the client to reconnect and pick up a fresh snapshot
        close = getattr(observer, "close", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            logger.info(f"Observer {key} was already closed: {e}")
