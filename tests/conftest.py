from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from live_orders.db import create_db_engine, create_tables
from live_orders.services.broadcaster import Broadcaster
from live_orders.services.lifecycle import OrderLifecycle
from live_orders.services.order_store import OrderStore
from live_orders.settings import Settings
from live_orders.web import create_app

T0 = datetime(2026, 10, 19, 12, 0, 0)


class FakeClock:
    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeObserver:
    def __init__(self, fail: bool = False):
        self.messages = []
        self.fail = fail
        self.closed = False

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.messages.append(data)

    async def close(self):
        self.closed = True

    def events(self, name: str) -> list:
        return [message["data"] for message in self.messages if message["event"] == name]


@pytest.fixture
def settings():
    return Settings(db_url="sqlite://", auto_migrate=False, passkey_hash_rounds=4)


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return OrderStore(engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def broadcaster():
    return Broadcaster()


@pytest.fixture
def observer(broadcaster):
    observer = FakeObserver()
    broadcaster.connect(observer)
    return observer


@pytest.fixture
def lifecycle(store, broadcaster, clock):
    return OrderLifecycle(store, broadcaster, clock=clock)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client
