"""
Notification Center
===================

Single-slot, self-expiring user notifications for the garden.

At most one notification is visible at a time. Posting a new one replaces
the current one and restarts the expiry countdown; the previous countdown is
cancelled so it can never clear its successor.

Listeners (the Socket.IO emitter, tests) are called on every post and on
every expiry with the new current notification, or ``None`` once it expires.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.enums.garden import NotificationKind
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

NotificationListener = Callable[[Optional["Notification"]], None]
TimerFactory = Callable[[float, Callable[[], None]], Any]

_sequence = itertools.count(1)


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    id: int = field(default_factory=lambda: next(_sequence))
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "message": self.message,
            "createdAt": self.created_at.isoformat(),
        }


def _thread_timer(interval: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class NotificationCenter:
    """Holds the one active notification and expires it after ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float = 4.0, *, timer_factory: TimerFactory = _thread_timer) -> None:
        self._ttl = float(ttl_seconds)
        self._timer_factory = timer_factory
        self._current: Optional[Notification] = None
        self._timer: Any = None
        self._listeners: List[NotificationListener] = []
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def post(self, kind: NotificationKind | str, message: str) -> Notification:
        notification = Notification(kind=NotificationKind(kind), message=message)
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._current = notification
            self._timer = self._timer_factory(self._ttl, lambda: self._expire(notification.id))
            self._timer.start()
        logger.info("Notification [%s]: %s", notification.kind.value, message)
        self._notify(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.post(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.post(NotificationKind.ERROR, message)

    def dismiss(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._current is None:
                return
            self._current = None
        self._notify(None)

    def _expire(self, notification_id: int) -> None:
        with self._lock:
            # a stale timer must not clear a newer notification
            if self._current is None or self._current.id != notification_id:
                return
            self._current = None
            self._timer = None
        self._notify(None)

    def _notify(self, notification: Optional[Notification]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener %r failed", listener)

    def shutdown(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
