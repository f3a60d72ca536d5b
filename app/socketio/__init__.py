"""
Socket.IO Event Handlers
========================

Namespaces:
- /notifications - garden notifications (success / error toasts)

Usage:
    Call after socketio.init_app() so the handlers land on the live server.

    from app.socketio import register_handlers
    register_handlers()
"""

import logging

logger = logging.getLogger(__name__)


def register_handlers():
    """
    Register all Socket.IO event handlers.

    This function must be called AFTER socketio.init_app(); every app
    instance gets a fresh Socket.IO server, so handlers are attached per call.
    """
    from app.extensions import socketio

    from . import notification_handlers

    notification_handlers.register(socketio)
    logger.info("Socket.IO handlers registered (notifications)")
