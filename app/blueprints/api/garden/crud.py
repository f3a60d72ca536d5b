"""
Plant CRUD Operations
=====================

Endpoints for listing, adding, editing, watering and removing plants in the
signed-in user's garden.
"""

from __future__ import annotations

import logging

from flask import Response, request
from pydantic import ValidationError

from app.blueprints.api._common import (
    fail as _fail,
    get_garden as _garden,
    get_json as _json,
    require_identity as _require_identity,
    require_plant as _require_plant,
    serialize_plant as _serialize,
    success as _success,
    wait_for as _wait,
)
from app.enums.garden import PlantFilter
from app.schemas import CreatePlantRequest, PlantListQuery, UpdatePlantRequest
from app.utils.http import safe_route

from . import garden_api

logger = logging.getLogger("garden_api.crud")


@garden_api.get("/plants")
@safe_route("Failed to list plants")
def list_plants() -> Response:
    """List plants, optionally filtered by ``?filter=all|thirsty|healthy``."""
    _require_identity()
    raw_filter = (request.args.get("filter") or PlantFilter.ALL.value).lower()
    try:
        mode = PlantListQuery(filter=raw_filter).filter
    except ValidationError:
        return _fail(f"Unknown filter '{raw_filter}'", 400, details={"allowed": [m.value for m in PlantFilter]})

    garden = _garden()
    now = garden.now()
    plants = garden.filtered(mode, now)
    return _success(
        {
            "plants": [_serialize(p, now) for p in plants],
            "count": len(plants),
            "filter": mode.value,
            "stats": garden.stats(now).to_dict(),
            "loading": garden.loading,
        }
    )


@garden_api.post("/plants")
@safe_route("Failed to add plant")
def add_plant() -> Response:
    identity = _require_identity()
    try:
        body = CreatePlantRequest.model_validate(_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False, include_context=False)})

    plant = _wait(_garden().add_plant(body.to_draft(user_id=identity)))
    logger.info("Added plant %s (%s)", plant.id, plant.species)
    return _success(_serialize(plant), 201)


@garden_api.get("/plants/<plant_id>")
@safe_route("Failed to get plant")
def get_plant(plant_id: str) -> Response:
    _require_identity()
    return _success(_serialize(_require_plant(plant_id)))


@garden_api.put("/plants/<plant_id>")
@safe_route("Failed to update plant")
def update_plant(plant_id: str) -> Response:
    _require_identity()
    current = _require_plant(plant_id)
    try:
        body = UpdatePlantRequest.model_validate(_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False, include_context=False)})

    updated = _wait(_garden().update_plant(body.apply_to(current)))
    return _success(_serialize(updated))


@garden_api.post("/plants/<plant_id>/water")
@safe_route("Failed to water plant")
def water_plant(plant_id: str) -> Response:
    """Mark watered now. Answers at once with the optimistic record.

    A store failure later reverts the plant and shows up as an error
    notification (``GET /notification`` or the Socket.IO event).
    """
    _require_identity()
    garden = _garden()
    future = garden.water_plant(plant_id)
    if future.done() and future.exception() is not None:
        raise future.exception()
    plant = garden.get_plant(plant_id)
    return _success(_serialize(plant) if plant else None, 202)


@garden_api.delete("/plants/<plant_id>")
@safe_route("Failed to delete plant")
def delete_plant(plant_id: str) -> Response:
    """Remove a plant. The request itself is the user's confirmation."""
    _require_identity()
    _wait(_garden().delete_plant(plant_id, confirm=lambda _plant: True))
    return _success({"id": plant_id, "deleted": True})
