"""
Blueprint Common Utilities
==========================

Shared helpers for the API blueprints: container access, request parsing,
response envelopes and plant serialization.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Any, Dict, Optional

from flask import current_app, request

from app.domain.exceptions import AuthenticationError, ExternalServiceError, NotFoundError
from app.domain.plant import Plant
from app.domain.watering import evaluate
from app.utils.http import error_response, success_response

logger = logging.getLogger("api._common")


# ============================================================================
# CONTAINER ACCESS
# ============================================================================

def get_container():
    """Get the service container from Flask app config."""
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_garden():
    return get_container().garden


def require_identity() -> str:
    """Identity the garden is loaded for; 401 when nobody is signed in."""
    identity = get_garden().identity
    if identity is None:
        raise AuthenticationError("Sign in to see your garden")
    return identity


def require_plant(plant_id: str) -> Plant:
    plant = get_garden().get_plant(plant_id)
    if plant is None:
        raise NotFoundError(f"Plant {plant_id} not found")
    return plant


def wait_for(future: Future) -> Any:
    """Wait for a store call within the configured remote timeout."""
    timeout = get_container().config.remote_timeout_seconds + 5
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        raise ExternalServiceError("Plant store did not respond in time") from None


# ============================================================================
# REQUEST HELPERS
# ============================================================================

def get_json() -> dict:
    """JSON request body, or an empty dict."""
    return request.get_json(silent=True) or {}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================

def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """``{"ok": true, "data": ..., "error": null}``"""
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """``{"ok": false, "data": null, "error": {...}}``"""
    return error_response(message, status, details=details)


def serialize_plant(plant: Plant, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Persisted record plus display name and current watering status."""
    data = plant.to_record()
    data["displayName"] = plant.display_name
    data["status"] = evaluate(plant, now or get_garden().now()).to_dict()
    return data
