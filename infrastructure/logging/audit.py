import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from app.utils.time import iso_now


class WindowsSafeRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that tolerates the log file being locked on Windows."""

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None
        try:
            super().doRollover()
        except PermissionError:
            # file still held by another process; keep appending to it
            pass
        finally:
            if not self.stream:
                self.stream = self._open()


class AuditLogger:
    """Append-only JSON-lines record of sign-ins and garden changes.

    One line per event::

        {"at": "...", "actor": "ana@example.com", "action": "plant.water",
         "resource": "plant:<id>", "outcome": "failure", "meta": {"error": "..."}}
    """

    def __init__(self, log_path: str, level: str = "INFO", *, backup_count: int = 10) -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        # one logger per file so tests writing to temp paths stay isolated
        self.logger = logging.getLogger(f"leaflink.audit.{self.log_path.resolve()}")
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        if not self.logger.handlers:
            handler_cls = WindowsSafeRotatingFileHandler if sys.platform == "win32" else RotatingFileHandler
            handler = handler_cls(
                filename=str(self.log_path),
                maxBytes=10 * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
                delay=True,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        payload: Dict[str, Any] = {
            "at": iso_now(timespec="seconds"),
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata
        self.logger.info(json.dumps(payload, default=str))

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
