"""
Optimistic updates
==================

Apply a change to in-memory state right away, confirm it against the store
afterwards, and restore the exact prior value if the store refuses.

Usage::

    update = OptimisticUpdate(
        snapshot=lambda: plant.last_watered_date,
        apply=lambda: set_date(plant_id, now),
        revert=lambda previous: set_date(plant_id, previous),
    )
    update.apply()
    pool.submit(update.run, lambda: store.update_plant(watered))

An update settles exactly once; a second commit or rollback is ignored.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class UpdateState(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class OptimisticUpdate(Generic[T]):
    """One snapshot/apply/commit-or-rollback cycle over a piece of state."""

    def __init__(
        self,
        *,
        snapshot: Callable[[], T],
        apply: Callable[[], None],
        revert: Callable[[T], None],
        on_commit: Optional[Callable[[], None]] = None,
        on_rollback: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self._snapshot = snapshot
        self._apply = apply
        self._revert = revert
        self._on_commit = on_commit
        self._on_rollback = on_rollback
        self._previous: Optional[T] = None
        self._state = UpdateState.PENDING
        self._lock = threading.Lock()

    @property
    def state(self) -> UpdateState:
        return self._state

    @property
    def previous(self) -> Optional[T]:
        """The value captured before the change was applied."""
        return self._previous

    def apply(self) -> T:
        """Capture the current value, then apply the optimistic change."""
        with self._lock:
            if self._state is not UpdateState.PENDING:
                raise RuntimeError(f"Optimistic update already {self._state.value}")
            self._previous = self._snapshot()
            self._apply()
            self._state = UpdateState.APPLIED
            return self._previous

    def commit(self) -> None:
        with self._lock:
            if self._state is not UpdateState.APPLIED:
                return
            self._state = UpdateState.COMMITTED
        if self._on_commit:
            self._on_commit()

    def rollback(self, error: BaseException) -> None:
        """Restore the captured value."""
        with self._lock:
            if self._state is not UpdateState.APPLIED:
                return
            self._revert(self._previous)  # type: ignore[arg-type]
            self._state = UpdateState.ROLLED_BACK
        logger.warning("Optimistic change rolled back: %s", error)
        if self._on_rollback:
            self._on_rollback(error)

    def run(self, call: Callable[[], R]) -> R:
        """Run the confirming ``call``; commit on success, roll back and re-raise on failure."""
        try:
            result = call()
        except Exception as exc:
            self.rollback(exc)
            raise
        self.commit()
        return result
