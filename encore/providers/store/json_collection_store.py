"""JSON-file collection store implementing ICollectionStore.

Each collection lives in ``<data_dir>/<collection>.json`` as a JSON array
of records.  Reads fail soft: a missing or unreadable file is an empty
collection, and an unparsable or schema-invalid file is logged as
``store_corrupt`` and treated as empty, since losing the cache only costs
re-enrichment.
Writes go to a temporary file in the same directory which is then
``os.replace``-d over the target, so readers never observe a half-written
collection.  File I/O runs in a worker thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import os
import re
import tempfile
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from encore.interfaces.collection_store import ICollectionStore, RecordT
from encore.utils.errors import StoreCorruptError, StoreError

logger = structlog.get_logger(logger_name=__name__)

_COLLECTION_NAME_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class JsonCollectionStore(ICollectionStore):
    """Whole-collection persistence on top of one JSON file per collection.

    Parameters
    ----------
    data_dir:
        Directory holding the collection files.  Created on first write.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    # ------------------------------------------------------------------
    # ICollectionStore implementation
    # ------------------------------------------------------------------

    async def load(self, collection: str, record_type: type[RecordT]) -> list[RecordT]:
        path = self._path_for(collection)
        try:
            return await asyncio.to_thread(self._read_sync, path, record_type)
        except FileNotFoundError:
            logger.debug("store_collection_missing", collection=collection)
            return []
        except OSError as exc:
            logger.warning("store_unreadable", collection=collection, error=str(exc))
            return []
        except StoreCorruptError as exc:
            logger.warning("store_corrupt", collection=collection, error=exc.message)
            return []

    async def replace(self, collection: str, records: Sequence[BaseModel]) -> None:
        path = self._path_for(collection)
        payload = [record.model_dump(mode="json") for record in records]
        try:
            await asyncio.to_thread(self._write_sync, path, payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("store_write_failed", collection=collection, error=str(exc))
            raise StoreError(
                message=f"Could not write collection '{collection}': {exc}",
            ) from exc
        logger.debug("store_collection_replaced", collection=collection, count=len(payload))

    def lock(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[collection] = lock
        return lock

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _path_for(self, collection: str) -> Path:
        if not _COLLECTION_NAME_RE.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self._data_dir / f"{collection}.json"

    @staticmethod
    def _read_sync(path: Path, record_type: type[RecordT]) -> list[RecordT]:
        raw = path.read_bytes()
        if not raw.strip():
            return []
        try:
            return TypeAdapter(list[record_type]).validate_json(raw)
        except ValidationError as exc:
            raise StoreCorruptError(
                message=f"{path.name}: {exc.error_count()} validation error(s)",
            ) from exc

    def _write_sync(self, path: Path, payload: list[dict]) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=".tmp", dir=self._data_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(payload, tmp, indent=2, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

