"""Device-resident key/value store backed by a single JSON file.

The file holds one JSON object; each key maps to an arbitrary JSON value.
Writes go through a temp file and ``os.replace`` so a crash never leaves a
half-written document, and an advisory lock file keeps two writers in the
same process tree from interleaving.

Note: single active writer per file is assumed. The lock protects against
accidental overlap, not against sustained multi-process contention.
"""
from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)


@contextmanager
def file_lock(lock_path: Path, timeout: float = 5.0, poll: float = 0.05) -> Iterator[None]:
    """Hold ``lock_path`` (created with ``O_EXCL``) for the duration of the block.

    Raises ``TimeoutError`` when another holder keeps it past ``timeout``
    seconds.
    """
    deadline = time.monotonic() + timeout
    while True:
        try:
            os.close(os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY))
            break
        except FileExistsError:
            if time.monotonic() >= deadline:
                raise TimeoutError(f"Store is locked by another writer: {lock_path}") from None
            time.sleep(poll)
    try:
        yield
    finally:
        try:
            os.unlink(lock_path)
        except FileNotFoundError:
            logger.warning("Lock file %s vanished while held", lock_path)


class JsonKeyStore:
    """Namespaced key/value storage persisted as one JSON document."""

    def __init__(self, path: str | os.PathLike, *, lock_timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._lock_timeout = lock_timeout

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed store document %s (not an object)", self.path)
            return {}
        return data

    def _write_document(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str, default: Any = None) -> Any:
        with file_lock(self.lock_path, self._lock_timeout):
            return self._read_document().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        """Replace the value under ``key``; other keys are left as they are."""
        with file_lock(self.lock_path, self._lock_timeout):
            data = self._read_document()
            data[key] = value
            self._write_document(data)
