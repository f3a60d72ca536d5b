from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.garden import garden_api
from app.blueprints.auth.routes import auth_bp
from app.config import load_config, setup_logging
from app.extensions import init_extensions, socketio


def create_app(
    config_overrides: dict[str, Any] | None = None,
    *,
    container_options: dict[str, Any] | None = None,
) -> Flask:
    """Build the LeafLink Flask app.

    ``config_overrides`` replaces :class:`~app.config.AppConfig` fields by
    name; ``container_options`` is passed to
    :meth:`~app.services.container.ServiceContainer.build` (tests inject
    fake HTTP sessions and timers this way).
    """
    config = load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key if hasattr(config, key) else key.lower(), value)

    setup_logging(debug=config.DEBUG, log_dir=config.log_dir)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["JSON_SORT_KEYS"] = False

    # Initialize Socket.IO BEFORE building ServiceContainer (EmitterService needs it)
    init_extensions(flask_app, config.socketio_cors_origins)

    from app.extensions import socketio as _socketio
    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config, socketio=_socketio, **(container_options or {}))
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown handlers ──────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    flask_app.extensions["leaflink_shutdown"] = _graceful_shutdown
    atexit.register(_graceful_shutdown, "atexit")

    # signal.signal only works from the main thread
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    # Errors escaping a route: domain exceptions by ``http_status``, anything
    # else a generic 500.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from app.domain.exceptions import LeafLinkError
        from app.utils.http import domain_error, error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, LeafLinkError):
            return domain_error(exc)

        return safe_error(exc, 500, context=f"unhandled {request.method} {request.path}")

    V1 = "/api/v1"

    flask_app.register_blueprint(auth_bp, url_prefix="/auth")
    flask_app.register_blueprint(garden_api, url_prefix=f"{V1}/garden")

    # Register Socket.IO event handlers (must be after socketio init)
    from app.socketio import register_handlers

    register_handlers()

    for bp_name in flask_app.blueprints:
        logging.info("Registered blueprint: %s", bp_name)

    logger = logging.getLogger(__name__)
    logger.info("LeafLink application initialized (backend=%s).", container.backend_mode.value)

    return flask_app


__all__ = ["create_app", "socketio"]
