"""
Plant Store Protocol
====================

Defines the contract that both plant stores implement. Uses
``typing.Protocol`` (structural subtyping) so the garden controller depends
on the four operations only, never on a concrete backend.

Backends
--------
* :class:`~infrastructure.database.repositories.plants.RemotePlantRepository`
  PostgREST table, one network call per operation.
* :class:`~infrastructure.database.repositories.plants.LocalPlantRepository`
  The whole collection serialized under one key of a device-resident
  JSON store.

Usage in service type hints::

    from infrastructure.database.repositories.base import PlantStore


    class GardenController:
        def __init__(self, store: PlantStore) -> None: ...

Failure semantics
-----------------
``list_plants`` never raises for backend errors; it logs and returns an
empty list. ``create_plant``, ``update_plant`` and ``delete_plant`` raise
:class:`~app.domain.exceptions.RepositoryError` carrying the backend's
message.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from app.domain.plant import Plant, PlantDraft


@runtime_checkable
class PlantStore(Protocol):
    """Four-operation CRUD contract partitioned by ``user_id``."""

    def list_plants(self, user_id: Optional[str] = None) -> List[Plant]:
        """Plants owned by ``user_id`` (all plants when ``None``), newest first."""
        ...

    def create_plant(self, draft: PlantDraft) -> Plant:
        """Persist ``draft`` and return the stored plant with its id."""
        ...

    def update_plant(self, plant: Plant) -> None:
        """Replace the stored record whose id matches ``plant.id``."""
        ...

    def delete_plant(self, plant_id: str) -> None:
        """Remove the record with ``plant_id``; unknown ids are a no-op."""
        ...


__all__ = ["PlantStore"]
