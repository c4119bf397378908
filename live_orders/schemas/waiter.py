from pydantic import AliasChoices, BaseModel, Field

from .orders import WireModel


class WaiterCreate(WireModel):
    waiter_name: str = Field(
        min_length=1, validation_alias=AliasChoices("waiterName", "waiter_name", "waitername")
    )
    # bcrypt only looks at the first 72 bytes
    passkey: str = Field(min_length=1, max_length=72)


class WaiterOut(WireModel):
    id: int
    waiter_name: str


class PasskeyCheck(BaseModel):
    passkey: str
