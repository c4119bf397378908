import json
from datetime import datetime, timedelta

from sqlmodel import Session

from live_orders.db import create_db_engine, run_migrations
from live_orders.db.orders import Order, OrderStatus
from live_orders.services.countdown import elapsed
from live_orders.services.waiter_directory import create_waiter
from live_orders.settings import Settings


def create_test_data():
    settings = Settings()
    run_migrations(settings)
    engine = create_db_engine(settings)

    with Session(engine) as session:
        # Waiters
        for name, passkey in [("Ana", "1111"), ("Bruno", "2222"), ("Carla", "3333")]:
            create_waiter(session, name, passkey, rounds=settings.passkey_hash_rounds)

        # Orders in every state
        now = datetime.now()
        pending_since = now - timedelta(minutes=7)
        orders = [
            Order(
                table_number="5",
                waiter_name="Ana",
                order_items=json.dumps(["Burger", "Lemonade"]),
            ),
            Order(
                table_number="2",
                waiter_name="Bruno",
                order_items=json.dumps(["Soup of the day"]),
                status=OrderStatus.PENDING,
                pending_start_time=pending_since,
            ),
            Order(
                table_number="9",
                waiter_name="Carla",
                order_items=json.dumps(["Steak", "Fries", "Water"]),
                status=OrderStatus.COMPLETED,
                created_at=now - timedelta(minutes=40),
                pending_start_time=now - timedelta(minutes=35),
                countdown=elapsed(now - timedelta(minutes=35), now - timedelta(minutes=12)),
                completed_at=now - timedelta(minutes=12),
            ),
        ]

        for order in orders:
            session.add(order)

        session.commit()
        print("Test data created successfully!")

if __name__ == "__main__":
    create_test_data()
