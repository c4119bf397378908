import alembic.command
import alembic.config
from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from ..settings import Settings

# Only SQLModel tables are picked up by Alembic
from .orders import Order
from .waiters import Waiter


def run_migrations(settings: Settings):
    alembic_cfg = alembic.config.Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.db_url)
    # Keep the logging configured by the application
    alembic_cfg.attributes["configure_logger"] = False
    alembic.command.upgrade(alembic_cfg, "head")


def create_db_engine(settings: Settings) -> Engine:
    if not settings.db_url.startswith("sqlite"):
        return create_engine(settings.db_url)

    # Store calls run in a threadpool, so sqlite connections must be shareable
    kwargs = {"connect_args": {"check_same_thread": False}}
    if settings.db_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(settings.db_url, **kwargs)


def create_tables(engine: Engine):
    SQLModel.metadata.create_all(engine)
