from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify

from app.utils.time import iso_now

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Generic user-facing messages; internals stay in the server log
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    405: "Method not allowed",
    409: "Conflict",
    415: "Unsupported media type",
    500: "An internal error occurred",
    503: "Service temporarily unavailable",
}


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
    details: dict | None = None,
) -> Response:
    """Return a generic error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception; logged server-side, never sent to the client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context logged alongside *exc*, e.g.
        ``"adding plant to row"``.
    details:
        Safe, machine-readable fields for the client (e.g. ``retryable``).
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status, details=details)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | None = None,
) -> Response:
    payload: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        payload.update(details)
    response_body: dict[str, Any] = {
        "ok": False,
        "data": None,
        "error": payload,
        "message": message,
    }
    if details:
        response_body["details"] = details
    response = jsonify(response_body)
    response.status_code = status
    return response


def error_for(exc: BaseException, *, context: str = "", fallback_status: int = 500) -> Response:
    """Map an exception to a response using ``http_status`` when it has one.

    4xx planner errors expose their message and ``detail``; 5xx responses
    carry the generic message plus ``retryable`` for store failures.
    """
    from app.domain.exceptions import GardenPlannerError

    if not isinstance(exc, GardenPlannerError):
        return safe_error(exc, fallback_status, context=context)

    status = exc.http_status
    if status >= 500:
        retryable = getattr(exc, "retryable", False)
        return safe_error(exc, status, context=context, details={"retryable": True} if retryable else None)
    message = str(exc) or context or _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[400])
    return error_response(message, status, details=exc.detail or None)


# ---------------------------------------------------------------------------
# Route decorator; removes per-route try/except boilerplate
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = "An internal error occurred",
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    Catches :class:`~app.domain.exceptions.GardenPlannerError` subclasses and
    maps them to the correct HTTP status via ``exc.http_status``. Any other
    ``Exception`` is logged and returns a generic 500.

    Usage::

        @garden_api.post("/rows/<int:row_id>/plants")
        @safe_route("Failed to add plant")
        def add_plant(row_id: int):
            ...

    Parameters
    ----------
    error_message:
        Context logged with the exception and used when a 4xx error has no
        message of its own.
    error_status:
        HTTP status for exceptions outside the planner hierarchy (default 500).
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                return error_for(exc, context=error_message, fallback_status=error_status)

        return wrapper

    return decorator
