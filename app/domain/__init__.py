"""
Garden Domain Package
=====================
The plant entity and the pure watering-schedule rules that run on it.
"""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    LeafLinkError,
    NotFoundError,
    RepositoryError,
    ServiceError,
    ValidationError,
)
from .plant import Plant, PlantDraft, new_plant_id
from .watering import GardenStats, WateringStatus, evaluate, filter_plants, garden_stats, is_healthy, is_thirsty

__all__ = [
    # Entity
    "Plant",
    "PlantDraft",
    "new_plant_id",
    # Schedule evaluation
    "GardenStats",
    "WateringStatus",
    "evaluate",
    "filter_plants",
    "garden_stats",
    "is_healthy",
    "is_thirsty",
    # Errors
    "AuthenticationError",
    "ConfigurationError",
    "ConflictError",
    "ExternalServiceError",
    "LeafLinkError",
    "NotFoundError",
    "RepositoryError",
    "ServiceError",
    "ValidationError",
]
