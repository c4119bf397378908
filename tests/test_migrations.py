from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect

from live_orders.db import create_db_engine, run_migrations
from live_orders.db.orders import Order
from live_orders.db.waiters import Waiter
from live_orders.settings import Settings
from live_orders.web import create_app

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def file_settings(tmp_path, monkeypatch):
    # alembic.ini is looked up relative to the working directory
    monkeypatch.chdir(PROJECT_ROOT)
    return Settings(db_url=f"sqlite:///{tmp_path / 'orders.db'}", passkey_hash_rounds=4)


def test_migrations_match_the_models(file_settings):
    run_migrations(file_settings)
    engine = create_db_engine(file_settings)
    try:
        inspector = inspect(engine)
        assert {"orders", "waiters", "alembic_version"} <= set(inspector.get_table_names())
        assert {c["name"] for c in inspector.get_columns("orders")} == set(Order.__table__.columns.keys())
        assert {c["name"] for c in inspector.get_columns("waiters")} == set(Waiter.__table__.columns.keys())
        assert "ix_orders_completed_at" in {ix["name"] for ix in inspector.get_indexes("orders")}
    finally:
        engine.dispose()


def test_migrations_can_run_twice(file_settings):
    run_migrations(file_settings)
    run_migrations(file_settings)


def test_default_startup_migrates_and_serves_orders(file_settings):
    assert file_settings.auto_migrate is True

    with TestClient(create_app(file_settings)) as client:
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"event": "ordersSnapshot", "data": []}
            ws.send_json({"event": "submitOrder", "data": {"tableNumber": "5", "waiterName": "Ana", "items": ["Tea"]}})
            assert ws.receive_json()["event"] == "orderCreated"
            assert ws.receive_json()["data"] == {"success": True, "orderId": 1}
            ws.send_json({"event": "updateStatus", "data": {"orderId": 1, "status": "pending"}})
            assert ws.receive_json()["data"]["status"] == "pending"
            ws.receive_json()
            ws.send_json({"event": "completeOrder", "data": 1})
            assert ws.receive_json()["data"]["status"] == "completed"
            assert ws.receive_json()["data"]["success"] is True

        order = client.get("/orders/1").json()

    assert order["status"] == "completed"
    assert order["pendingStartTime"] is not None
    assert order["completedAt"] is not None
