import logging

import bcrypt
from sqlmodel import Session, select

from ..db.waiters import Waiter
from ..errors import ValidationFailed

logger = logging.getLogger(__name__)

MAX_PASSKEY_BYTES = 72


def hash_passkey(passkey: str, rounds: int = 12) -> str:
    encoded = passkey.encode("utf-8")
    if not encoded or len(encoded) > MAX_PASSKEY_BYTES:
        raise ValidationFailed(f"Passkey must be 1-{MAX_PASSKEY_BYTES} bytes long")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def create_waiter(session: Session, waiter_name: str, passkey: str, rounds: int = 12) -> Waiter:
    waiter = Waiter(waiter_name=waiter_name, passkey_hash=hash_passkey(passkey, rounds))
    session.add(waiter)
    session.commit()
    session.refresh(waiter)
    logger.info(f"Waiter {waiter.id} ({waiter.waiter_name}) added to roster")
    return waiter


def list_waiters(session: Session) -> list[Waiter]:
    return list(session.exec(select(Waiter).order_by(Waiter.id)).all())


def delete_waiter(session: Session, waiter_id: int) -> bool:
    waiter = session.get(Waiter, waiter_id)
    if not waiter:
        return False
    session.delete(waiter)
    session.commit()
    logger.info(f"Waiter {waiter_id} removed from roster")
    return True


def first_waiter(session: Session) -> Waiter | None:
    return session.exec(select(Waiter).order_by(Waiter.id).limit(1)).first()


def verify_passkey(session: Session, passkey: str) -> Waiter | None:
    """
    Find the waiter whose passkey matches.

    Hashes are salted, so every roster entry is checked. The roster of a single
    restaurant is small enough for that.
    """
    encoded = passkey.encode("utf-8")
    if not encoded or len(encoded) > MAX_PASSKEY_BYTES:
        return None

    for waiter in list_waiters(session):
        if bcrypt.checkpw(encoded, waiter.passkey_hash.encode("ascii")):
            return waiter
    return None
