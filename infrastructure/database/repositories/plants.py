"""
Plant Repositories
==================

The two interchangeable :class:`~infrastructure.database.repositories.base.PlantStore`
backends and the factory that picks one at start-up.

Both backends generate the plant id (UUID4) before writing, so ids look the
same whichever store is active, and both return plants newest first.
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from app.domain.exceptions import RepositoryError, ValidationError
from app.domain.plant import Plant, PlantDraft, new_plant_id
from app.utils.time import utc_now
from infrastructure.database.json_store import JsonKeyStore
from infrastructure.database.rest_client import PostgrestClient

if TYPE_CHECKING:
    from app.config import AppConfig

logger = logging.getLogger(__name__)

STORAGE_KEY = "leaflink_plants"
PLANTS_TABLE = "plants"


def _parse_records(records: Iterable[Dict[str, Any]], source: str) -> List[Plant]:
    plants: List[Plant] = []
    for record in records:
        try:
            plants.append(Plant.from_record(record))
        except ValidationError as exc:
            logger.warning("Skipping invalid plant record from %s: %s", source, exc)
    return plants


class LocalPlantRepository:
    """Plant store kept on the device as one serialized collection.

    Every mutation reads the whole collection, modifies it and writes it
    back under :data:`STORAGE_KEY`. New plants are prepended, so stored
    order is already newest first.
    """

    def __init__(
        self,
        store: JsonKeyStore,
        *,
        key: str = STORAGE_KEY,
        id_factory: Callable[[], str] = new_plant_id,
    ) -> None:
        self._store = store
        self._key = key
        self._id_factory = id_factory
        # read-modify-write cycles from the worker pool must not interleave
        self._lock = threading.Lock()

    def _read(self) -> List[Dict[str, Any]]:
        records = self._store.get_item(self._key, [])
        if not isinstance(records, list):
            logger.warning("Local plant collection under %s is not a list; treating as empty", self._key)
            return []
        return [r for r in records if isinstance(r, dict)]

    def _mutate(self, change: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> None:
        with self._lock:
            try:
                self._store.set_item(self._key, change(self._read()))
            except (OSError, TimeoutError, ValueError) as exc:
                logger.error("Local plant store write failed: %s", exc)
                raise RepositoryError(f"Local store unavailable: {exc}") from exc

    def list_plants(self, user_id: Optional[str] = None) -> List[Plant]:
        try:
            records = self._read()
        except (OSError, TimeoutError, ValueError) as exc:
            logger.error("Failed to read local plant store: %s", exc)
            return []
        if user_id is not None:
            records = [r for r in records if r.get("userId") == user_id]
        return _parse_records(records, "local store")

    def create_plant(self, draft: PlantDraft) -> Plant:
        plant = draft.to_plant(self._id_factory(), now=utc_now())
        record = plant.to_record()
        self._mutate(lambda records: [record, *records])
        logger.debug("Stored plant %s locally", plant.id)
        return plant

    def update_plant(self, plant: Plant) -> None:
        record = plant.to_record()
        self._mutate(lambda records: [record if r.get("id") == plant.id else r for r in records])

    def delete_plant(self, plant_id: str) -> None:
        self._mutate(lambda records: [r for r in records if r.get("id") != plant_id])


class RemotePlantRepository:
    """Plant store backed by a remote PostgREST ``plants`` table."""

    def __init__(
        self,
        client: PostgrestClient,
        *,
        table: str = PLANTS_TABLE,
        id_factory: Callable[[], str] = new_plant_id,
    ) -> None:
        self._client = client
        self._table = table
        self._id_factory = id_factory

    def list_plants(self, user_id: Optional[str] = None) -> List[Plant]:
        filters = {"userId": user_id} if user_id is not None else None
        try:
            rows = self._client.select(self._table, filters=filters, order="created_at.desc")
        except RepositoryError as exc:
            # Load failures degrade to an empty garden.
            logger.error("Failed to list plants for %s: %s", user_id, exc)
            return []
        return _parse_records(rows, "remote store")

    def create_plant(self, draft: PlantDraft) -> Plant:
        plant = draft.to_plant(self._id_factory(), now=utc_now())
        row = self._client.insert(self._table, plant.to_record())
        try:
            return Plant.from_record(row)
        except ValidationError as exc:
            raise RepositoryError(f"Remote store returned an invalid plant: {exc}") from exc

    def update_plant(self, plant: Plant) -> None:
        self._client.update(self._table, plant.to_record(), match={"id": plant.id})

    def delete_plant(self, plant_id: str) -> None:
        self._client.delete(self._table, match={"id": plant_id})


def create_plant_repository(config: "AppConfig", *, client: Optional[PostgrestClient] = None):
    """Pick the plant store once, from configuration.

    The remote store is used when both the Supabase URL and key are set;
    otherwise the garden lives in the local JSON store.
    """
    if config.remote_store_configured:
        client = client or PostgrestClient(
            config.supabase_url,
            config.supabase_key,
            timeout=config.remote_timeout_seconds,
        )
        logger.info("Using remote plant store at %s", config.supabase_url)
        return RemotePlantRepository(client)

    logger.info("Remote store not configured; using local plant store at %s", config.local_store_path)
    return LocalPlantRepository(JsonKeyStore(config.local_store_path))
