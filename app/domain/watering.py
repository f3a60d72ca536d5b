"""
Watering schedule evaluation
============================

Pure functions deriving a plant's watering status from its last watering,
its interval and the current time.

Classification (calendar days in the timezone of ``now``)::

    due_date   = last_watered_date + water_frequency_days  (local wall-clock)
    days_until = difference_in_days(due_date, now)

    DUE_TODAY  due_date falls on today's calendar day (always wins)
    OVERDUE    days_until < 0
    UPCOMING   otherwise

A plant is *thirsty* when it is overdue or due today and *healthy* when its
next watering is upcoming.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from app.domain.plant import Plant
from app.enums.garden import PlantFilter, WateringState
from app.utils.time import add_days, difference_in_days, ensure_aware, is_today, utc_now


@dataclass(frozen=True)
class WateringStatus:
    """Result of evaluating one plant at one instant."""

    due_date: datetime
    days_until: int
    state: WateringState

    @property
    def is_thirsty(self) -> bool:
        return self.state in (WateringState.OVERDUE, WateringState.DUE_TODAY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dueDate": self.due_date.isoformat(),
            "daysUntil": self.days_until,
            "state": self.state.value,
            "thirsty": self.is_thirsty,
        }


@dataclass(frozen=True)
class GardenStats:
    total: int
    thirsty: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "thirsty": self.thirsty}


def evaluate(plant: Plant, now: Optional[datetime] = None) -> WateringStatus:
    """Compute due date, days until due and watering state for ``plant``."""
    now = ensure_aware(now or utc_now())
    due_date = add_days(plant.last_watered_date, plant.water_frequency_days, tz=now.tzinfo)
    days_until = difference_in_days(due_date, now)

    if is_today(due_date, now):
        state = WateringState.DUE_TODAY
    elif days_until < 0:
        state = WateringState.OVERDUE
    else:
        state = WateringState.UPCOMING

    return WateringStatus(due_date=due_date, days_until=days_until, state=state)


def is_thirsty(plant: Plant, now: Optional[datetime] = None) -> bool:
    return evaluate(plant, now).is_thirsty


def is_healthy(plant: Plant, now: Optional[datetime] = None) -> bool:
    return evaluate(plant, now).state is WateringState.UPCOMING


def garden_stats(plants: Iterable[Plant], now: Optional[datetime] = None) -> GardenStats:
    """Total plant count and how many of them need water."""
    now = now or utc_now()
    items = list(plants)
    return GardenStats(total=len(items), thirsty=sum(1 for p in items if is_thirsty(p, now)))


def filter_plants(
    plants: Iterable[Plant],
    mode: PlantFilter | str = PlantFilter.ALL,
    now: Optional[datetime] = None,
) -> List[Plant]:
    """Plants matching ``mode``, in their input order."""
    mode = PlantFilter(mode)
    now = now or utc_now()
    if mode is PlantFilter.THIRSTY:
        return [p for p in plants if is_thirsty(p, now)]
    if mode is PlantFilter.HEALTHY:
        return [p for p in plants if is_healthy(p, now)]
    return list(plants)
