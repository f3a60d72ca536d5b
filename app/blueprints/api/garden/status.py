"""
Garden Status
=============

Backend mode, summary counts and the active notification.
"""

from __future__ import annotations

from flask import Response

from app.blueprints.api._common import (
    get_container as _container,
    get_garden as _garden,
    require_identity as _require_identity,
    success as _success,
)
from app.utils.http import safe_route

from . import garden_api


@garden_api.get("/status")
@safe_route("Failed to get garden status")
def garden_status() -> Response:
    container = _container()
    garden = container.garden
    notification = container.notifications.current
    return _success(
        {
            "mode": container.backend_mode.value,
            "identity": garden.identity,
            "loading": garden.loading,
            "adviceProvider": container.care_advisor.provider_name,
            "notification": notification.to_dict() if notification else None,
        }
    )


@garden_api.get("/stats")
@safe_route("Failed to get garden stats")
def garden_stats() -> Response:
    _require_identity()
    return _success(_garden().stats().to_dict())


@garden_api.get("/notification")
@safe_route("Failed to get notification")
def current_notification() -> Response:
    notification = _container().notifications.current
    return _success(notification.to_dict() if notification else None)
