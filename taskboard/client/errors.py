"""Errors surfaced by the API client.

``ApiError`` subclasses map one-to-one to the server's status codes; anything
that never produced a usable response becomes ``NetworkError``.
"""

from __future__ import annotations

from typing import Any

import httpx

UNKNOWN_ERROR = "An unknown error occurred"


class ApiError(Exception):
    status_code: int | None = None

    def __init__(self, message: str, *, status_code: int | None = None, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []


class ValidationError(ApiError):
    status_code = 422


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class NetworkError(ApiError):
    pass


_BY_STATUS: dict[int, type[ApiError]] = {
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    422: ValidationError,
}


def _validation_messages(errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return ", ".join(p for p in parts if p)


def error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None

    detail = body.get("detail") if isinstance(body, dict) else None
    errors: list[dict[str, Any]] = []
    if isinstance(detail, list):
        errors = [e for e in detail if isinstance(e, dict)]
        message = _validation_messages(errors) or response.reason_phrase
    elif isinstance(detail, str) and detail:
        message = detail
    else:
        message = response.reason_phrase or UNKNOWN_ERROR

    if response.status_code >= 500:
        return NetworkError(message, status_code=response.status_code)
    cls = _BY_STATUS.get(response.status_code, ApiError)
    return cls(message, status_code=response.status_code, errors=errors)


def error_message(error: BaseException | str | None) -> str:
    """User-visible text for an error raised anywhere in the client."""
    if error is None:
        return UNKNOWN_ERROR
    if isinstance(error, str):
        return error
    if isinstance(error, ApiError):
        return error.message or UNKNOWN_ERROR
    return str(error) or UNKNOWN_ERROR
