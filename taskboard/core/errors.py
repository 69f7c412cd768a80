"""Domain errors raised by the service layer.

Routers let these propagate; the handlers registered in ``taskboard.main``
turn them into JSON responses with the matching status code.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class TaskboardError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    status_code = 422
    default_message = "The given data was invalid"


class Forbidden(TaskboardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized"


class NotFound(TaskboardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(TaskboardError):
    default_message = "Email already registered"


class AuthenticationError(TaskboardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )
