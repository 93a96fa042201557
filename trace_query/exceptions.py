from typing import Any

from fastapi import HTTPException


class TraceQueryError(HTTPException):
    """Base exception for trace queries.

    Carries an HTTP status so an API surface can return it as-is. Only
    subclasses marked ``user_facing`` expose their message to clients.
    """

    user_facing: bool = False

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(status_code=status_code, detail=message)

    def __str__(self) -> str:
        return str(self.detail)


class UserFacingError(TraceQueryError):
    """Exception that is safe to expose to the client."""

    user_facing = True


class InvalidArgumentError(UserFacingError, ValueError):
    """Raised when a query request is constructed from invalid arguments."""

    def __init__(self, message: str, field: str, value: Any = None):
        """Initialize an invalid argument error.

        Args:
            message: Which constraint failed.
            field: Name of the offending field.
            value: The offending value, when it helps the caller.
        """
        super().__init__(message, status_code=400)
        self.field = field
        self.value = value
