"""
Flat-file adapter: one pretty-printed JSON array per collection.

Reads are memoized for the life of the process. Writes go through the memo
and then to disk, so the process always reads its own writes; changes made by
another process are only seen after invalidate().
"""

import copy
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from maintenance_app.data.storage.base import (
    Collection,
    DuplicateKeyError,
    RecordNotFoundError,
    StorageUnavailableError,
)
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.storage.json")


class JsonFileCollection(Collection):

    def __init__(self, path, name: Optional[str] = None, key_field: str = 'id'):
        self.path = Path(path)
        super().__init__(name or self.path.stem, key_field)
        self._documents = None
        self._lock = threading.RLock()

    def _load(self) -> List[Dict[str, Any]]:
        if self._documents is not None:
            return self._documents
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                documents = json.load(f)
        except FileNotFoundError:
            documents = []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read collection {self.name} from {self.path}: {e}")
            raise StorageUnavailableError(f"{self.name}: {e}") from e

        if not isinstance(documents, list):
            raise StorageUnavailableError(f"{self.name}: {self.path} does not hold a JSON array")
        self._documents = documents
        logger.debug(f"Loaded {len(documents)} documents from {self.path}")
        return self._documents

    def _write(self, documents: List[Dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(documents, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Could not write collection {self.name} to {self.path}: {e}")
            self._documents = None
            raise StorageUnavailableError(f"{self.name}: {e}") from e
        self._documents = documents

    def get_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._load())

    def get_by_id(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            for document in self._load():
                if document.get(self.key_field) == key:
                    return copy.deepcopy(document)
        return None

    def add(self, document: Dict[str, Any]) -> Dict[str, Any]:
        key = self.key_of(document)
        with self._lock:
            documents = self._load()
            if any(d.get(self.key_field) == key for d in documents):
                raise DuplicateKeyError(self.name, key)
            self._write(documents + [copy.deepcopy(document)])
        return copy.deepcopy(document)

    def update(self, key: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            documents = self._load()
            index = next((i for i, d in enumerate(documents) if d.get(self.key_field) == key), None)
            if index is None:
                raise RecordNotFoundError(self.name, key)
            others = {d.get(self.key_field) for i, d in enumerate(documents) if i != index}
            merged = self._merge(documents[index], key, partial, others)
            updated = list(documents)
            updated[index] = merged
            self._write(updated)
        return copy.deepcopy(merged)

    def delete(self, key: str) -> None:
        with self._lock:
            documents = self._load()
            remaining = [d for d in documents if d.get(self.key_field) != key]
            if len(remaining) == len(documents):
                return
            self._write(remaining)

    def invalidate(self) -> None:
        with self._lock:
            self._documents = None
