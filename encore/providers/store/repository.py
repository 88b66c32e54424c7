"""Keyed repository over one collection of an ICollectionStore.

Gives services ``get`` / ``upsert`` / ``delete`` by key while keeping the
store's whole-collection semantics underneath: every call reloads the
full collection, and every write replaces it under the collection lock.
Swapping the store for an indexed backend later does not change callers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from pydantic import BaseModel

from encore.interfaces.collection_store import ICollectionStore

T = TypeVar("T", bound=BaseModel)


class CollectionRepository(Generic[T]):
    """Repository for records of *record_type* stored in *collection*.

    Parameters
    ----------
    store:
        Backing collection store.
    collection:
        Collection name, e.g. ``"artists"``.
    record_type:
        Model class of the stored records.
    key:
        Extracts the lookup key from a record.  When several records share
        a key, the first one in stored order wins.
    """

    def __init__(
        self,
        store: ICollectionStore,
        collection: str,
        record_type: type[T],
        key: Callable[[T], str],
    ) -> None:
        self._store = store
        self._collection = collection
        self._record_type = record_type
        self._key = key

    async def all(self) -> list[T]:
        return await self._store.load(self._collection, self._record_type)

    async def get(self, key: str) -> T | None:
        for record in await self.all():
            if self._key(record) == key:
                return record
        return None

    async def upsert(self, record: T) -> None:
        """Replace the first record sharing *record*'s key, or append it."""
        async with self.mutate() as records:
            for index, existing in enumerate(records):
                if self._key(existing) == self._key(record):
                    records[index] = record
                    break
            else:
                records.append(record)

    async def delete(self, key: str) -> bool:
        """Remove every record with *key*.  Returns ``True`` if any was removed."""
        async with self.mutate() as records:
            kept = [r for r in records if self._key(r) != key]
            removed = len(kept) != len(records)
            records[:] = kept
        return removed

    @asynccontextmanager
    async def mutate(self) -> AsyncIterator[list[T]]:
        """Lock, load, yield the live list, then write it back.

        Nothing is written if the body raises.  Do not call providers
        inside the block; the collection stays locked for its duration.
        """
        async with self._store.lock(self._collection):
            records = await self._store.load(self._collection, self._record_type)
            yield records
            await self._store.replace(self._collection, records)
