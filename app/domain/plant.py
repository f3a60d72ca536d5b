"""
Plant - the garden's only persistent entity
===========================================

Holds plant state as data only. Behavior (persistence, watering, rollback)
lives in repositories and services.

Records are persisted with the camelCase column names used by both plant
stores::

    {"id", "name", "species", "waterFrequencyDays", "lastWateredDate",
     "imageUrl", "lightNeeds", "notes", "userId", "created_at"}
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from app.domain.exceptions import ValidationError
from app.utils.time import coerce_datetime, utc_now


def _validate_frequency(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"waterFrequencyDays must be an integer, got {value!r}")
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"waterFrequencyDays must be an integer, got {value!r}") from None
    if days != value and not isinstance(value, str):
        raise ValidationError(f"waterFrequencyDays must be a whole number, got {value!r}")
    if days < 1:
        raise ValidationError("waterFrequencyDays must be at least 1")
    return days


def _require_datetime(value: Any, field_name: str) -> datetime:
    parsed = coerce_datetime(value)
    if parsed is None:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp: {value!r}")
    return parsed


PLACEHOLDER_IMAGES = (
    "https://images.unsplash.com/photo-1485955900006-10f4d324d411?auto=format&fit=crop&q=80&w=600",
    "https://images.unsplash.com/photo-1509423355108-138903112362?auto=format&fit=crop&q=80&w=600",
    "https://images.unsplash.com/photo-1520412099551-62b6bafeb5bb?auto=format&fit=crop&q=80&w=600",
    "https://images.unsplash.com/photo-1463936575829-25148e1db1b8?auto=format&fit=crop&q=80&w=600",
    "https://images.unsplash.com/photo-1501004318641-b39e6451bec6?auto=format&fit=crop&q=80&w=600",
)


def placeholder_image() -> str:
    """A stock plant photo for plants added without a picture."""
    return random.choice(PLACEHOLDER_IMAGES)


def new_plant_id() -> str:
    """Universally unique plant id, generated before the store is called."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class PlantDraft:
    """A plant the user wants to add; it has no id yet.

    A blank ``image_url`` is replaced by one of :data:`PLACEHOLDER_IMAGES`.
    """

    species: str
    water_frequency_days: int
    name: str = ""
    last_watered_date: Optional[datetime] = None
    image_url: Optional[str] = None
    light_needs: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "water_frequency_days", _validate_frequency(self.water_frequency_days))
        if self.last_watered_date is not None:
            object.__setattr__(
                self, "last_watered_date", _require_datetime(self.last_watered_date, "lastWateredDate")
            )
        if not (self.image_url or "").strip():
            object.__setattr__(self, "image_url", placeholder_image())

    def to_plant(self, plant_id: str, *, now: Optional[datetime] = None) -> "Plant":
        created = now or utc_now()
        return Plant(
            id=plant_id,
            name=self.name,
            species=self.species,
            water_frequency_days=self.water_frequency_days,
            last_watered_date=self.last_watered_date or created,
            image_url=self.image_url,
            light_needs=self.light_needs,
            notes=self.notes,
            user_id=self.user_id,
            created_at=created,
        )


@dataclass(frozen=True)
class Plant:
    """A stored plant. Instances are immutable; use :meth:`evolve`."""

    id: str
    species: str
    water_frequency_days: int
    last_watered_date: datetime
    name: str = ""
    image_url: Optional[str] = None
    light_needs: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Plant id is required")
        object.__setattr__(self, "water_frequency_days", _validate_frequency(self.water_frequency_days))
        object.__setattr__(self, "last_watered_date", _require_datetime(self.last_watered_date, "lastWateredDate"))
        if self.created_at is not None:
            object.__setattr__(self, "created_at", _require_datetime(self.created_at, "created_at"))

    @property
    def display_name(self) -> str:
        return self.name or self.species

    def evolve(self, **changes: Any) -> "Plant":
        """Return a copy with ``changes`` applied. ``id`` cannot change."""
        if "id" in changes and changes["id"] != self.id:
            raise ValidationError("Plant id is immutable")
        return replace(self, **changes)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted (camelCase) record shape."""
        return {
            "id": self.id,
            "name": self.name,
            "species": self.species,
            "waterFrequencyDays": self.water_frequency_days,
            "lastWateredDate": self.last_watered_date.isoformat(),
            "imageUrl": self.image_url,
            "lightNeeds": self.light_needs,
            "notes": self.notes,
            "userId": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Plant":
        """Build a plant from a persisted record, validating required fields."""
        if not isinstance(record, dict):
            raise ValidationError(f"Plant record must be an object, got {type(record).__name__}")
        missing = [key for key in ("id", "species", "waterFrequencyDays", "lastWateredDate") if key not in record]
        if missing:
            raise ValidationError(f"Plant record missing fields: {', '.join(missing)}")
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            species=record.get("species") or "",
            water_frequency_days=record["waterFrequencyDays"],
            last_watered_date=record["lastWateredDate"],
            image_url=record.get("imageUrl"),
            light_needs=record.get("lightNeeds"),
            notes=record.get("notes"),
            user_id=record.get("userId"),
            created_at=record.get("created_at"),
        )
