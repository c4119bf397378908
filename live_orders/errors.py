"""
Errors raised by the order lifecycle.

Every error carries a human readable ``message`` which is sent back to the client
that issued the command. Errors are never broadcast to other observers.
"""


class OrderError(Exception):
    kind = "OrderError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(OrderError):
    kind = "NotFound"


class ValidationFailed(OrderError):
    kind = "ValidationFailed"


class StoreUnavailable(OrderError):
    kind = "StoreUnavailable"


class InvalidTransition(OrderError):
    kind = "InvalidTransition"
