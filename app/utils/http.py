"""
Response envelope and route error handling for the garden API
=============================================================

Bodies always look like ``{"ok": bool, "data": ..., "error": {...} | null}``.
A failed request repeats ``message`` (and ``details``, if any) at the top
level so clients can read it without unwrapping ``error``.

Store failures are special: the garden controller has already put the
backend's message in the notification slot, so the HTTP error carries a
generic text plus that notification under ``details.notification``.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional

from flask import Response, current_app, jsonify

from app.domain.exceptions import LeafLinkError, RepositoryError
from app.utils.time import iso_now

_log = logging.getLogger(__name__)

STORE_FAILURE_MESSAGE = "Your change could not be saved"

_GENERIC_MESSAGES: dict[int, str] = {
    500: "An internal error occurred",
    502: "The plant store is not responding",
}


def _generic(status: int) -> str:
    return _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    body: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        body["message"] = message
    response = jsonify(body)
    response.status_code = status
    return response


def error_response(message: str, status: int = 500, *, details: dict | None = None) -> Response:
    error: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    body: dict[str, Any] = {"ok": False, "data": None, "error": error, "message": message}
    if details:
        error.update(details)
        body["details"] = details
    response = jsonify(body)
    response.status_code = status
    return response


def safe_error(exc: BaseException, status: int = 500, *, context: str = "") -> Response:
    """Log ``exc`` with its traceback and answer with a generic message."""
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    return error_response(_generic(status), status)


def _slot_notification() -> Optional[dict]:
    container = current_app.config.get("CONTAINER")
    if container is None:
        return None
    current = container.notifications.current
    return current.to_dict() if current is not None else None


def store_failure(exc: RepositoryError, *, context: str = "") -> Response:
    """Generic store-failure answer pointing at the error notification."""
    _log.warning("Store failure [%s]: %s", context, exc)
    notification = _slot_notification()
    details = {"notification": notification} if notification else None
    return error_response(STORE_FAILURE_MESSAGE, exc.http_status, details=details)


def domain_error(exc: LeafLinkError, *, context: str = "") -> Response:
    """Map a :class:`LeafLinkError` to a response by its ``http_status``."""
    if isinstance(exc, RepositoryError):
        return store_failure(exc, context=context)
    if exc.http_status >= 500:
        return safe_error(exc, exc.http_status, context=context or type(exc).__name__)
    return error_response(str(exc) or context or "Request failed", exc.http_status)


def safe_route(error_message: str = "Request failed") -> Callable:
    """Turn exceptions raised by a route into enveloped JSON errors.

    ``error_message`` names the operation in the server log and is the
    fallback text for a 4xx error raised without a message.

    Usage::

        @garden_api.post("/plants/<plant_id>/water")
        @safe_route("Failed to water plant")
        def water_plant(plant_id: str):
            ...
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except LeafLinkError as exc:
                return domain_error(exc, context=error_message)
            except Exception as exc:
                return safe_error(exc, 500, context=error_message)

        return wrapper

    return decorator
