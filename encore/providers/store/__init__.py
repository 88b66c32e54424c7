"""Flat collection store and the keyed repository built on it."""

from encore.providers.store.json_collection_store import JsonCollectionStore
from encore.providers.store.repository import CollectionRepository

__all__ = ["CollectionRepository", "JsonCollectionStore"]
