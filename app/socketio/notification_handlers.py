"""app.socketio.notification_handlers

Lifecycle handlers for the ``/notifications`` namespace. New clients are
sent the active notification, if any, so a reconnecting UI does not miss a
toast that is still on screen.
"""

import logging

from flask import current_app, request
from flask_socketio import SocketIO, emit

from app.utils.emitters import SOCKETIO_NAMESPACE_NOTIFICATIONS, WS_EVENT_GARDEN_NOTIFICATION

logger = logging.getLogger(__name__)


def _current_payload():
    container = current_app.config.get("CONTAINER")
    if container is None:
        return None
    notification = container.notifications.current
    return notification.to_dict() if notification else None


def handle_notifications_connect(*_args):
    logger.debug("Client %s connected to %s", request.sid, SOCKETIO_NAMESPACE_NOTIFICATIONS)
    emit(WS_EVENT_GARDEN_NOTIFICATION, _current_payload())


def handle_notifications_disconnect(*_args):
    logger.debug("Client %s disconnected from %s", request.sid, SOCKETIO_NAMESPACE_NOTIFICATIONS)


def handle_get_notification(_data=None):
    emit(WS_EVENT_GARDEN_NOTIFICATION, _current_payload())


def register(sio: SocketIO) -> None:
    """Attach the handlers to ``sio``'s current server (once per app)."""
    sio.on_event("connect", handle_notifications_connect, namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS)
    sio.on_event("disconnect", handle_notifications_disconnect, namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS)
    sio.on_event("get_notification", handle_get_notification, namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS)
