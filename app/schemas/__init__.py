"""
Schemas Module
==============

Pydantic models for request validation and WebSocket payloads.
"""

from app.schemas.auth import CredentialsRequest
from app.schemas.garden import CreatePlantRequest, NotificationPayload, PlantListQuery, UpdatePlantRequest

__all__ = [
    "CreatePlantRequest",
    "CredentialsRequest",
    "NotificationPayload",
    "PlantListQuery",
    "UpdatePlantRequest",
]
