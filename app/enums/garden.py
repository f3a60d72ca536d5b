"""
Garden-related Enumerations
===========================

Watering status, list filters and notification kinds used by the garden
controller and the API.
"""

from enum import Enum


class WateringState(str, Enum):
    """Three-way watering classification of a plant"""

    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"

    def __str__(self):
        return self.value


class PlantFilter(str, Enum):
    """Garden list filters"""

    ALL = "all"
    THIRSTY = "thirsty"
    HEALTHY = "healthy"

    def __str__(self):
        return self.value


class NotificationKind(str, Enum):
    """User-facing notification flavours"""

    SUCCESS = "success"
    ERROR = "error"

    def __str__(self):
        return self.value


class BackendMode(str, Enum):
    """Which plant store the process runs against"""

    REMOTE = "remote"
    LOCAL = "local"

    def __str__(self):
        return self.value
