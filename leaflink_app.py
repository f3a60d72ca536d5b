"""Entry point for the LeafLink garden backend.

Serves the JSON API and the Socket.IO notification channel with the
configuration read from the environment.
"""
from __future__ import annotations

import logging
import os

from app import create_app, socketio


def main() -> int:
    app = create_app()
    config = app.config["CONTAINER"].config

    host = os.getenv("LEAFLINK_HOST", "0.0.0.0")
    port = int(os.getenv("LEAFLINK_PORT", "8000"))

    logging.info("Starting server on %s:%s", host, port)
    logging.info("SocketIO async_mode: %s", socketio.async_mode)

    try:
        socketio.run(
            app,
            host=host,
            port=port,
            debug=config.DEBUG,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
