import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from sqlalchemy.engine.base import Engine
from sqlmodel import Session

from live_orders.db import create_db_engine, create_tables, run_migrations
from live_orders.services.broadcaster import Broadcaster
from live_orders.services.lifecycle import OrderLifecycle
from live_orders.services.order_store import OrderStore
from live_orders.settings import Settings

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_engine(request: Request):
    return request.app.state.engine


def get_lifecycle(request: Request) -> OrderLifecycle:
    return request.app.state.lifecycle


def get_session(engine: Engine = Depends(get_engine)):
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
LifecycleDep = Annotated[OrderLifecycle, Depends(get_lifecycle)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    engine = create_db_engine(settings)
    if settings.auto_migrate:
        run_migrations(settings)
    else:
        create_tables(engine)
    app.state.engine = engine

    broadcaster = Broadcaster()
    app.state.broadcaster = broadcaster
    app.state.lifecycle = OrderLifecycle(
        OrderStore(engine),
        broadcaster,
        max_complete_attempts=settings.complete_max_attempts,
    )
    logger.info("Order lifecycle engine started")

    yield # Wait until the app shuts down

    engine.dispose()
