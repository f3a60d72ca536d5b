"""Plant store backends exposing one contract over two persistence layers.

The store protocol is available for type-checking and dependency injection::

    from infrastructure.database.repositories.base import PlantStore
"""

from infrastructure.database.repositories.base import PlantStore
from infrastructure.database.repositories.plants import (
    LocalPlantRepository,
    RemotePlantRepository,
    create_plant_repository,
)

__all__ = [
    "LocalPlantRepository",
    "PlantStore",
    "RemotePlantRepository",
    "create_plant_repository",
]
