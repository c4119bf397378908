from live_orders.db.waiters import Waiter
from sqlmodel import Session, select


def test_root(client):
    assert client.get("/").json() == {"message": "Live Orders API", "status": "running"}


def test_waiter_roster_crud(client):
    created = client.post("/waiters", json={"waitername": "Ana", "passkey": "1234"})
    assert created.json() == {"success": True, "id": 1}
    client.post("/waiters", json={"waiterName": "Bruno", "passkey": "5678"})

    assert client.get("/waiters").json() == [
        {"id": 1, "waiterName": "Ana"},
        {"id": 2, "waiterName": "Bruno"},
    ]

    assert client.delete("/waiters/1").json() == {"success": True}
    assert client.delete("/waiters/1").status_code == 404
    assert [waiter["id"] for waiter in client.get("/waiters").json()] == [2]


def test_passkeys_are_stored_hashed(client):
    client.post("/waiters", json={"waiterName": "Ana", "passkey": "1234"})

    with Session(client.app.state.engine) as session:
        waiter = session.exec(select(Waiter)).one()

    assert waiter.passkey_hash != "1234"
    assert waiter.passkey_hash.startswith("$2")


def test_waiter_validation(client):
    assert client.post("/waiters", json={"waiterName": "Ana"}).status_code == 422
    assert client.post("/waiters", json={"waiterName": "Ana", "passkey": ""}).status_code == 422
    assert client.post("/waiters", json={"waiterName": "Ana", "passkey": "é" * 40}).status_code == 400


def test_order_reads(client):
    assert client.get("/orders/1").status_code == 404

    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        for table in ("1", "2"):
            ws.send_json({"event": "submitOrder", "data": {"tableNumber": table, "waiterName": "Ana", "items": ["Tea"]}})
            ws.receive_json()
            ws.receive_json()
        ws.send_json({"event": "updateStatus", "data": {"orderId": 2, "status": "pending"}})
        ws.receive_json()
        ws.receive_json()

    order = client.get("/orders/1").json()
    assert order["tableNumber"] == "1"
    assert order["items"] == ["Tea"]
    assert [o["id"] for o in client.get("/orders").json()] == [1, 2]
    assert [o["id"] for o in client.get("/orders", params={"status": "new"}).json()] == [1]
    assert [o["id"] for o in client.get("/orders/pending").json()] == [2]
    assert client.get("/orders", params={"status": "cooking"}).status_code == 422
