"""Abstract base class for the flat collection store.

A collection is a named, ordered list of records of one model type
(``artists``, ``users``, ``spotify_token``).  The store only knows how to
load a whole collection and replace a whole collection; there are no
partial updates, indexes or transactions.  Callers that mutate must load,
change and write back the entire list, holding :meth:`lock` for the
collection across that cycle when other coroutines may write concurrently.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


class ICollectionStore(ABC):
    """Contract for whole-collection persistence."""

    @abstractmethod
    async def load(self, collection: str, record_type: type[RecordT]) -> list[RecordT]:
        """Return every record in *collection*, parsed as *record_type*.

        Parameters
        ----------
        collection:
            Logical collection name, e.g. ``"artists"``.
        record_type:
            Pydantic model class each stored record is validated into.

        Returns
        -------
        list
            The records in stored order.  A missing or unparsable
            collection yields an empty list; this method never raises
            for read problems.
        """

    @abstractmethod
    async def replace(self, collection: str, records: Sequence[BaseModel]) -> None:
        """Overwrite *collection* with *records*.

        The swap is atomic from a reader's point of view: a concurrent
        :meth:`load` sees either the old or the new collection.

        Raises
        ------
        encore.utils.errors.StoreError
            If the collection cannot be written.
        """

    @abstractmethod
    def lock(self, collection: str) -> asyncio.Lock:
        """Return the lock that serialises read-modify-write cycles on *collection*.

        The same lock object is returned for every call with the same name.
        """
