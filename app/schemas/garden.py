"""
Garden Schemas
==============

Request/response schemas for the garden endpoints.

Field names follow the persisted camelCase record shape; snake_case names
are accepted as well.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.plant import Plant, PlantDraft
from app.enums.garden import NotificationKind, PlantFilter


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be a whole number of days")
    return value


class CreatePlantRequest(BaseModel):
    """Request schema for adding a plant."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(default="", max_length=120, description="Nickname; display falls back to species")
    species: str = Field(..., min_length=1, max_length=200, description="Species or common name")
    water_frequency_days: int = Field(..., alias="waterFrequencyDays", ge=1, le=365, description="Days between waterings")
    last_watered_date: datetime | None = Field(
        default=None, alias="lastWateredDate", description="Defaults to now when omitted"
    )
    image_url: str | None = Field(default=None, alias="imageUrl")
    light_needs: str | None = Field(default=None, alias="lightNeeds", max_length=200)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("water_frequency_days", mode="before")
    @classmethod
    def reject_bool_frequency(cls, value: Any) -> Any:
        return _reject_bool(value)

    def to_draft(self, user_id: str | None = None) -> PlantDraft:
        return PlantDraft(
            name=self.name,
            species=self.species,
            water_frequency_days=self.water_frequency_days,
            last_watered_date=self.last_watered_date,
            image_url=self.image_url,
            light_needs=self.light_needs,
            notes=self.notes,
            user_id=user_id,
        )


class UpdatePlantRequest(BaseModel):
    """Request schema for editing a plant; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str | None = Field(default=None, max_length=120)
    species: str | None = Field(default=None, min_length=1, max_length=200)
    water_frequency_days: int | None = Field(default=None, alias="waterFrequencyDays", ge=1, le=365)
    last_watered_date: datetime | None = Field(default=None, alias="lastWateredDate")
    image_url: str | None = Field(default=None, alias="imageUrl")
    light_needs: str | None = Field(default=None, alias="lightNeeds", max_length=200)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("water_frequency_days", mode="before")
    @classmethod
    def reject_bool_frequency(cls, value: Any) -> Any:
        return _reject_bool(value)

    def apply_to(self, plant: Plant) -> Plant:
        changes = self.model_dump(exclude_unset=True, by_alias=False)
        for required in ("species", "water_frequency_days", "last_watered_date"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        if "name" in changes and changes["name"] is None:
            changes["name"] = ""
        return plant.evolve(**changes)


class PlantListQuery(BaseModel):
    filter: PlantFilter = Field(default=PlantFilter.ALL)


class NotificationPayload(BaseModel):
    """Payload pushed to clients for the active notification."""

    id: int
    type: NotificationKind
    message: str
    createdAt: str

    @classmethod
    def from_notification(cls, notification) -> "NotificationPayload":
        return cls(
            id=notification.id,
            type=notification.kind,
            message=notification.message,
            createdAt=notification.created_at.isoformat(),
        )
