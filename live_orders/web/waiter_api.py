"""
Waiter roster API.

Contains endpoints for:
- Listing waiters (passkey hashes are never returned)
- Adding a waiter with a hashed passkey
- Removing a waiter
"""
import logging
from typing import List

from fastapi import APIRouter, HTTPException

from live_orders.dependencies import SessionDep, SettingsDep
from live_orders.errors import ValidationFailed
from live_orders.schemas.waiter import WaiterCreate, WaiterOut
from live_orders.services.waiter_directory import create_waiter, delete_waiter, list_waiters

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/waiters", response_model=List[WaiterOut], response_model_by_alias=True)
def list_roster(session: SessionDep):
    return [WaiterOut(id=waiter.id, waiter_name=waiter.waiter_name) for waiter in list_waiters(session)]


@router.post("/waiters")
def add_waiter(payload: WaiterCreate, session: SessionDep, settings: SettingsDep):
    try:
        waiter = create_waiter(
            session, payload.waiter_name, payload.passkey, rounds=settings.passkey_hash_rounds
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"success": True, "id": waiter.id}


@router.delete("/waiters/{waiter_id}")
def remove_waiter(waiter_id: int, session: SessionDep):
    if not delete_waiter(session, waiter_id):
        raise HTTPException(status_code=404, detail="Waiter not found")
    return {"success": True}
