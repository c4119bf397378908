from typing import Optional

from sqlmodel import Field, SQLModel


class Waiter(SQLModel, table=True):
    __tablename__ = "waiters"

    id: Optional[int] = Field(default=None, primary_key=True)
    waiter_name: str = Field()
    passkey_hash: str = Field()  # bcrypt hash, the cleartext passkey is never stored
