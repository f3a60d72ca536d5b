"""
Garden Controller
=================

Application service owning the signed-in user's in-memory garden.

The in-memory ``plants`` list is the source of truth for displayed state;
the plant store is the durable source of truth. Store calls run on a small
worker pool and every operation hands back a ``concurrent.futures.Future``,
so request threads only block when they choose to wait.

Mutation strategies:

- add: pessimistic. The plant appears only after the store returns it.
- water / update: optimistic. Applied in memory at once; restored to the
  exact previous value if the store fails.
- delete: confirm first, then remove from memory once the store confirms.

Only one mutation per plant id may be in flight. A second one is rejected
with :class:`~app.domain.exceptions.ConflictError` so a late rollback can
never overwrite a newer value.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set

from app.domain.exceptions import ConflictError, NotFoundError
from app.domain.plant import Plant, PlantDraft
from app.domain.watering import GardenStats, WateringStatus, evaluate, filter_plants, garden_stats
from app.enums.garden import PlantFilter
from app.utils.optimistic import OptimisticUpdate
from app.utils.time import utc_now

if TYPE_CHECKING:
    from app.services.application.notifications_service import NotificationCenter
    from app.services.utilities.email_service import PlantNotifier
    from infrastructure.database.repositories.base import PlantStore
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Plant], bool]


def _reason(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _done(value) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future


class GardenController:
    """Holds the garden for one identity and mediates every change to it."""

    def __init__(
        self,
        store: "PlantStore",
        notifications: "NotificationCenter",
        *,
        notifier: Optional["PlantNotifier"] = None,
        audit_logger: Optional["AuditLogger"] = None,
        max_workers: int = 4,
        clock: Callable[[], datetime] = utc_now,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._store = store
        self._notifications = notifications
        self._notifier = notifier
        self._audit = audit_logger
        self._clock = clock
        self._tz = tz
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="garden-store")

        self._lock = threading.RLock()
        self._plants: List[Plant] = []
        self._identity: Optional[str] = None
        self._loading = False
        self._generation = 0
        self._in_flight: Set[str] = set()
        self._pending_load: Optional[Future] = None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    @property
    def plants(self) -> List[Plant]:
        with self._lock:
            return list(self._plants)

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def loading(self) -> bool:
        return self._loading

    def now(self) -> datetime:
        now = self._clock()
        return now.astimezone(self._tz) if self._tz else now

    def get_plant(self, plant_id: str) -> Optional[Plant]:
        with self._lock:
            return next((p for p in self._plants if p.id == plant_id), None)

    def statuses(self, now: Optional[datetime] = None) -> Dict[str, WateringStatus]:
        now = now or self.now()
        return {p.id: evaluate(p, now) for p in self.plants}

    def stats(self, now: Optional[datetime] = None) -> GardenStats:
        return garden_stats(self.plants, now or self.now())

    def filtered(self, mode: PlantFilter | str = PlantFilter.ALL, now: Optional[datetime] = None) -> List[Plant]:
        return filter_plants(self.plants, mode, now or self.now())

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #
    def load(self, identity: Optional[str]) -> "Future[List[Plant]]":
        """Replace the garden with ``identity``'s plants from the store."""
        with self._lock:
            self._identity = identity
            self._loading = True
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(self._load, identity, generation)
            self._pending_load = future
        return future

    def wait_loaded(self, timeout: Optional[float] = None) -> List[Plant]:
        """Block until the most recent load has finished."""
        future = self._pending_load
        if future is None:
            return self.plants
        future.result(timeout=timeout)
        return self.plants

    def _load(self, identity: Optional[str], generation: int) -> List[Plant]:
        try:
            plants = self._store.list_plants(identity)
        except Exception:
            # Load failures degrade to an empty garden.
            logger.exception("Failed to load plants for %s", identity)
            plants = []
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale load for %s", identity)
                return plants
            self._plants = list(plants)
            self._loading = False
        logger.info("Loaded %d plant(s) for %s", len(plants), identity)
        return plants

    def clear(self) -> None:
        """Forget the current identity and empty the garden (sign-out)."""
        with self._lock:
            self._identity = None
            self._plants = []
            self._loading = False
            self._generation += 1

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def add_plant(self, draft: PlantDraft) -> "Future[Plant]":
        if draft.user_id is None:
            draft = replace(draft, user_id=self._identity)
        return self._executor.submit(self._add, draft)

    def _add(self, draft: PlantDraft) -> Plant:
        try:
            plant = self._store.create_plant(draft)
        except Exception as exc:
            logger.error("Failed to add plant %s: %s", draft.species, exc)
            self._notifications.error(f"Failed to add plant: {_reason(exc)}")
            self._record("plant.add", draft.species, "failure", error=_reason(exc))
            raise

        with self._lock:
            if plant.user_id == self._identity:
                self._plants.insert(0, plant)
        self._notifications.success("Plant added to your garden!")
        self._record("plant.add", plant.id, "success", species=plant.species)

        if self._notifier is not None and plant.user_id:
            self._notifier.notify_plant_added(plant, plant.user_id)
        return plant

    def water_plant(self, plant_id: str) -> "Future[Plant]":
        """Mark ``plant_id`` watered now; reverts if the store refuses."""
        now = self._clock()
        with self._lock:
            plant = self.get_plant(plant_id)
            if plant is None:
                return _failed(NotFoundError(f"Plant {plant_id} not found"))
            if not self._claim(plant):
                return _failed(ConflictError(f"A change to {plant.display_name} is still being saved"))
            watered = plant.evolve(last_watered_date=now)
            update: OptimisticUpdate[datetime] = OptimisticUpdate(
                snapshot=lambda: plant.last_watered_date,
                apply=lambda: self._swap(plant_id, lambda p: p.evolve(last_watered_date=now)),
                revert=lambda previous: self._swap(plant_id, lambda p: p.evolve(last_watered_date=previous)),
                on_rollback=lambda exc: self._notifications.error(f"Failed to update: {_reason(exc)}"),
            )
            update.apply()

        def confirm() -> Plant:
            self._store.update_plant(watered)
            self._record("plant.water", plant_id, "success")
            return watered

        return self._executor.submit(self._settle, update, confirm, plant_id, "plant.water")

    def update_plant(self, plant: Plant) -> "Future[Plant]":
        """Replace the stored plant with ``plant``; reverts if the store refuses."""
        with self._lock:
            current = self.get_plant(plant.id)
            if current is None:
                return _failed(NotFoundError(f"Plant {plant.id} not found"))
            if not self._claim(current):
                return _failed(ConflictError(f"A change to {current.display_name} is still being saved"))
            update: OptimisticUpdate[Plant] = OptimisticUpdate(
                snapshot=lambda: current,
                apply=lambda: self._swap(plant.id, lambda _p: plant),
                revert=lambda previous: self._swap(plant.id, lambda _p: previous),
                on_rollback=lambda exc: self._notifications.error(f"Failed to update: {_reason(exc)}"),
            )
            update.apply()

        def confirm() -> Plant:
            self._store.update_plant(plant)
            self._record("plant.update", plant.id, "success")
            return plant

        return self._executor.submit(self._settle, update, confirm, plant.id, "plant.update")

    def delete_plant(self, plant_id: str, confirm: ConfirmCallback) -> "Future[bool]":
        """Delete ``plant_id`` once ``confirm`` agrees; resolves to False when declined."""
        plant = self.get_plant(plant_id)
        if plant is None:
            return _failed(NotFoundError(f"Plant {plant_id} not found"))
        if not confirm(plant):
            logger.debug("Deletion of %s declined", plant_id)
            return _done(False)
        with self._lock:
            if not self._claim(plant):
                return _failed(ConflictError(f"A change to {plant.display_name} is still being saved"))
        return self._executor.submit(self._delete, plant_id)

    def _delete(self, plant_id: str) -> bool:
        try:
            self._store.delete_plant(plant_id)
        except Exception as exc:
            logger.error("Failed to delete plant %s: %s", plant_id, exc)
            self._notifications.error(f"Failed to delete: {_reason(exc)}")
            self._record("plant.delete", plant_id, "failure", error=_reason(exc))
            raise
        finally:
            self._release(plant_id)

        with self._lock:
            self._plants = [p for p in self._plants if p.id != plant_id]
        self._notifications.success("Plant removed from garden")
        self._record("plant.delete", plant_id, "success")
        return True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _settle(self, update: OptimisticUpdate, confirm: Callable[[], Plant], plant_id: str, action: str) -> Plant:
        try:
            return update.run(confirm)
        except Exception as exc:
            logger.error("%s failed for %s: %s", action, plant_id, exc)
            self._record(action, plant_id, "failure", error=_reason(exc))
            raise
        finally:
            self._release(plant_id)

    def _claim(self, plant: Plant) -> bool:
        with self._lock:
            if plant.id in self._in_flight:
                logger.warning("Rejected concurrent change to plant %s", plant.id)
                self._notifications.error(f"A change to {plant.display_name} is still being saved")
                return False
            self._in_flight.add(plant.id)
            return True

    def _release(self, plant_id: str) -> None:
        with self._lock:
            self._in_flight.discard(plant_id)

    def _swap(self, plant_id: str, change: Callable[[Plant], Plant]) -> None:
        with self._lock:
            self._plants = [change(p) if p.id == plant_id else p for p in self._plants]

    def _record(self, action: str, resource: str, outcome: str, **meta) -> None:
        if self._audit is None:
            return
        self._audit.log_event(
            actor=self._identity or "anonymous",
            action=action,
            resource=f"plant:{resource}",
            outcome=outcome,
            **meta,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; waits for in-flight store calls by default."""
        self._executor.shutdown(wait=wait)
