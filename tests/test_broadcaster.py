from live_orders.services.broadcaster import ORDER_CREATED, ORDERS_SNAPSHOT, Broadcaster
from tests.conftest import FakeObserver


async def test_broadcast_reaches_every_observer():
    broadcaster = Broadcaster()
    first, second = FakeObserver(), FakeObserver()
    broadcaster.connect(first)
    broadcaster.connect(second)

    await broadcaster.broadcast(ORDER_CREATED, {"id": 1})

    assert first.messages == [{"event": ORDER_CREATED, "data": {"id": 1}}]
    assert second.messages == first.messages


async def test_snapshot_goes_to_one_observer_only():
    broadcaster = Broadcaster()
    newcomer, other = FakeObserver(), FakeObserver()
    key = broadcaster.connect(newcomer)
    broadcaster.connect(other)

    await broadcaster.send_snapshot(key, [{"id": 1}, {"id": 2}])

    assert newcomer.messages == [{"event": ORDERS_SNAPSHOT, "data": [{"id": 1}, {"id": 2}]}]
    assert other.messages == []


async def test_failed_observer_is_dropped_and_others_still_receive():
    broadcaster = Broadcaster()
    broken, healthy = FakeObserver(fail=True), FakeObserver()
    broken_key = broadcaster.connect(broken)
    broadcaster.connect(healthy)

    await broadcaster.broadcast(ORDER_CREATED, {"id": 1})

    assert broken_key not in broadcaster
    assert len(broadcaster) == 1
    assert healthy.events(ORDER_CREATED) == [{"id": 1}]


async def test_disconnected_observer_misses_events():
    broadcaster = Broadcaster()
    observer = FakeObserver()
    key = broadcaster.connect(observer)
    broadcaster.disconnect(key)
    broadcaster.disconnect(key)

    await broadcaster.broadcast(ORDER_CREATED, {"id": 1})

    assert observer.messages == []
    assert len(broadcaster) == 0


async def test_dropped_observer_is_closed():
    broadcaster = Broadcaster()
    broken = FakeObserver(fail=True)
    broadcaster.connect(broken)

    await broadcaster.broadcast(ORDER_CREATED, {"id": 1})

    assert broken.closed is True


class SendOnlyObserver:
    async def send_json(self, data):
        raise ConnectionResetError("peer went away")


async def test_dropping_observer_without_close():
    broadcaster = Broadcaster()
    broadcaster.connect(SendOnlyObserver())

    await broadcaster.broadcast(ORDER_CREATED, {"id": 1})

    assert len(broadcaster) == 0
