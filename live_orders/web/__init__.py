"""
Main FastAPI application module.

Builds the application, registers the routers and wires the lifespan handler.
"""
import logging

from fastapi import FastAPI

from live_orders.dependencies import lifespan
from live_orders.settings import Settings

from .order_api import router as order_router
from .sync_ws import router as sync_router
from .waiter_api import router as waiter_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    application = FastAPI(title="Live Orders", lifespan=lifespan)
    application.state.settings = settings or Settings()

    application.include_router(order_router)
    application.include_router(waiter_router)
    application.include_router(sync_router)

    @application.get("/")
    async def root():
        """Health check"""
        return {"message": "Live Orders API", "status": "running"}

    return application


app = create_app()
