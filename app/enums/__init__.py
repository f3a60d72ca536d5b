"""
Enums Module
============

Enumeration types for the LeafLink garden backend.
"""

from app.enums.garden import BackendMode, NotificationKind, PlantFilter, WateringState

__all__ = [
    "BackendMode",
    "NotificationKind",
    "PlantFilter",
    "WateringState",
]
