"""
Persistence contract shared by the flat-file and relational adapters.

A collection stores JSON documents identified by one key field (`id`, or
`partNumber` for warehouse components). Both adapters must behave the same:

- get_all() returns copies of every document, in insertion order
- get_by_id(key) returns a copy or None
- add(document) raises DuplicateKeyError when the key exists
- update(key, partial) shallow-merges the partial, raises RecordNotFoundError
  when the key is unknown and DuplicateKeyError when a changed key collides
- delete(key) is a no-op for unknown keys
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StorageError(Exception):
    """Base class for persistence errors."""


class DuplicateKeyError(StorageError):
    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}: key '{key}' already exists")


class RecordNotFoundError(StorageError):
    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"{collection}: key '{key}' not found")


class StorageUnavailableError(StorageError):
    """The backing file or database could not be reached or read."""


class Collection(ABC):

    def __init__(self, name: str, key_field: str = 'id'):
        self.name = name
        self.key_field = key_field

    def key_of(self, document: Dict[str, Any]) -> str:
        key = document.get(self.key_field)
        if key is None or str(key).strip() == '':
            raise ValueError(f"{self.name}: document has no '{self.key_field}'")
        return key

    @abstractmethod
    def get_all(self) -> List[Dict[str, Any]]:
        ...

    def get_by_id(self, key: str) -> Optional[Dict[str, Any]]:
        for document in self.get_all():
            if document.get(self.key_field) == key:
                return document
        return None

    def exists(self, key: str) -> bool:
        return self.get_by_id(key) is not None

    @abstractmethod
    def add(self, document: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, key: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    def invalidate(self) -> None:
        """Drop any memoized reads. Adapters without a memo ignore this."""

    def _merge(self, current: Dict[str, Any], key: str, partial: Dict[str, Any], others) -> Dict[str, Any]:
        """Apply a partial update, checking a changed key against the other keys."""
        partial = copy.deepcopy(partial or {})
        new_key = partial.get(self.key_field, key)
        if new_key != key and new_key in others:
            raise DuplicateKeyError(self.name, new_key)
        merged = copy.deepcopy(current)
        merged.update(partial)
        return merged
