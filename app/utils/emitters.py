"""
WebSocket Emitters
==================

Pushes garden notifications to connected clients over Socket.IO.

Each notification is emitted as ``garden_notification`` on the
``/notifications`` namespace; expiry is emitted as the same event with a
``null`` payload so clients can hide the toast.
"""

import logging
from typing import Optional

from flask_socketio import SocketIO

from app.schemas.garden import NotificationPayload
from app.services.application.notifications_service import Notification

logger = logging.getLogger(__name__)

WS_EVENT_GARDEN_NOTIFICATION = "garden_notification"
SOCKETIO_NAMESPACE_NOTIFICATIONS = "/notifications"


class EmitterService:
    """Thin wrapper around :class:`SocketIO` emit."""

    def __init__(self, sio: SocketIO):
        self.sio = sio

    def emit(self, event: str, payload: Optional[dict], room: str | None = None, namespace: str = "/") -> None:
        """Emit ``event``; failures are logged, never raised into the caller."""
        try:
            self.sio.emit(event, payload, room=room, namespace=namespace)
        except Exception:
            logger.exception("Failed to emit event '%s' to room '%s'", event, room)

    def emit_notification(self, notification: Optional[Notification], room: str | None = None) -> None:
        payload = None
        if notification is not None:
            payload = NotificationPayload.from_notification(notification).model_dump(mode="json")
        self.emit(
            event=WS_EVENT_GARDEN_NOTIFICATION,
            payload=payload,
            room=room,
            namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS,
        )
        logger.debug("Notification %s emitted", payload["id"] if payload else "cleared")
