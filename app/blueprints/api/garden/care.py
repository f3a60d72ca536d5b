"""
Care Advice
===========

``GET /advice?species=Monstera`` returns a suggested watering interval,
light needs and a tip, or ``null`` when no advice is available.
"""

from __future__ import annotations

from flask import Response, request

from app.blueprints.api._common import fail as _fail, get_container as _container, success as _success
from app.utils.http import safe_route

from . import garden_api


@garden_api.get("/advice")
@safe_route("Failed to get care advice")
def care_advice() -> Response:
    species = (request.args.get("species") or "").strip()
    if not species:
        return _fail("Query parameter 'species' is required", 400)
    suggestion = _container().care_advisor.get_advice(species)
    return _success(suggestion.to_dict() if suggestion else None)
