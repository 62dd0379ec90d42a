"""An in-process document store with the same interface as the MongoDB store."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from typing import Any

from bson import ObjectId

from goblin.mongo import (
    DatabaseInaccessibleError,
    DocumentNotFoundError,
    Filter,
    SortSpec,
    _as_filter,
    _as_sort,
    _as_update,
)

log = logging.getLogger(__name__)


def _matches(doc: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter.items())


def _sort_key(value: Any) -> tuple:
    # Missing and null values sort before everything else, as in MongoDB.
    return (0,) if value is None else (1, value)


class MemoryDB:
    """Documents kept in memory, grouped by collection name."""

    def __init__(self) -> None:
        self._collections: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._closed = False

    def _docs(self, collection_name: str) -> list[dict[str, Any]]:
        if self._closed:
            raise DatabaseInaccessibleError()
        return self._collections.setdefault(collection_name, [])

    def _matching(self, collection_name: str, filter: Filter) -> list[dict[str, Any]]:
        criteria = _as_filter(filter)
        return [doc for doc in self._docs(collection_name) if _matches(doc, criteria)]

    def _insert(self, collection_name: str, filter: Filter, fields: Mapping[str, Any]) -> None:
        new_doc = {
            key: copy.deepcopy(value)
            for key, value in _as_filter(filter).items()
            if not key.startswith("$")
        }
        new_doc.update(copy.deepcopy(dict(fields)))
        new_doc.setdefault("_id", ObjectId())
        self._docs(collection_name).append(new_doc)

    def find_all_ids(self, collection_name: str, filter: Filter = None) -> list[str]:
        """Return the ID, as a string, of every matching document."""
        with self._lock:
            return [str(doc["_id"]) for doc in self._matching(collection_name, filter)]

    def find_many(
        self,
        collection_name: str,
        filter: Filter = None,
        sort_by: SortSpec = None,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """Return copies of the matching documents, sorted and limited; a limit of 0 means none."""
        with self._lock:
            docs = copy.deepcopy(self._matching(collection_name, filter))
        for key, direction in reversed(_as_sort(sort_by)):
            docs.sort(key=lambda doc, k=key: _sort_key(doc.get(k)), reverse=direction < 0)
        count = abs(limit)
        return docs[:count] if count else docs

    def find_one(self, collection_name: str, filter: Filter = None) -> dict[str, Any]:
        """Return a copy of the first matching document, or raise DocumentNotFoundError."""
        with self._lock:
            found = self._matching(collection_name, filter)
            if not found:
                log.debug("document not found in %s", collection_name)
                raise DocumentNotFoundError()
            return copy.deepcopy(found[0])

    def update_or_insert(
        self, collection_name: str, filter: Filter, data: Mapping[str, Any]
    ) -> None:
        """Set the fields of the first matching document, inserting one if none matches."""
        fields = _as_update(data)
        with self._lock:
            found = self._matching(collection_name, filter)
            if found:
                found[0].update(copy.deepcopy(fields))
            else:
                self._insert(collection_name, filter, fields)

    def update_many(
        self, collection_name: str, filter: Filter, data: Mapping[str, Any]
    ) -> None:
        """Set the fields of every matching document, inserting one if none matches."""
        fields = _as_update(data)
        with self._lock:
            found = self._matching(collection_name, filter)
            if not found:
                self._insert(collection_name, filter, fields)
            for doc in found:
                doc.update(copy.deepcopy(fields))

    def count(self, collection_name: str, filter: Filter = None) -> int:
        """Return how many documents match the filter."""
        with self._lock:
            return len(self._matching(collection_name, filter))

    def delete(self, collection_name: str, filter: Filter) -> int:
        """Delete the first matching document and return how many were removed."""
        with self._lock:
            found = self._matching(collection_name, filter)
            if not found:
                log.warning("document not found in %s", collection_name)
                return 0
            docs = self._docs(collection_name)
            docs.remove(found[0])
            return 1

    def delete_many(self, collection_name: str, filter: Filter) -> int:
        """Delete every matching document and return how many were removed."""
        criteria = _as_filter(filter)
        with self._lock:
            docs = self._docs(collection_name)
            kept = [doc for doc in docs if not _matches(doc, criteria)]
            removed = len(docs) - len(kept)
            docs[:] = kept
        if removed == 0:
            log.warning("document not found in %s", collection_name)
        return removed

    def close(self) -> None:
        """Close the store; later operations raise DatabaseInaccessibleError."""
        with self._lock:
            self._closed = True

    def __str__(self) -> str:
        return "memory"