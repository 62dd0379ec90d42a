"""Document storage backed by a MongoDB database."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import pymongo
from pymongo.errors import PyMongoError

log = logging.getLogger(__name__)

DB_TIMEOUT_SECONDS = 10
_DB_TIMEOUT_MS = DB_TIMEOUT_SECONDS * 1000

Filter = Union[Mapping[str, Any], Iterable[tuple[str, Any]], None]
SortSpec = Union[Mapping[str, int], Iterable[tuple[str, int]], None]


class DatabaseError(Exception):
    """Base class for all database failures."""

    default_message = "database error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class DocumentNotFoundError(DatabaseError):
    """No document matched the filter."""

    default_message = "document not found"


class InvalidDocumentError(DatabaseError):
    """A stored document could not be decoded."""

    default_message = "unable to decode document"


class DatabaseInaccessibleError(DatabaseError):
    """The database could not be reached or created."""

    default_message = "unable to create or access the database"


class CollectionNotAccessibleError(DatabaseError):
    """A collection could not be read or created."""

    default_message = "unable to create or access the collection"


def _as_filter(filter: Filter) -> dict[str, Any]:
    """Normalise a mapping or a sequence of key/value pairs into a filter document."""
    if filter is None:
        return {}
    if isinstance(filter, Mapping):
        return dict(filter)
    return dict(filter)


def _as_sort(sort_by: SortSpec) -> list[tuple[str, int]]:
    """Normalise a sort specification into an ordered list of (key, direction) pairs."""
    if sort_by is None:
        return []
    if isinstance(sort_by, Mapping):
        return [(key, int(direction)) for key, direction in sort_by.items()]
    return [(key, int(direction)) for key, direction in sort_by]


def _as_update(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the fields to store, leaving out an unset document ID."""
    if not isinstance(data, Mapping):
        raise InvalidDocumentError("document to store must be a mapping")
    return {key: value for key, value in data.items() if not (key == "_id" and value is None)}


class MongoDB:
    """A connection to a MongoDB database holding the bot's collections."""

    def __init__(self, uri: str = "", dbname: str = "", client: Any = None) -> None:
        self.uri = uri
        self.dbname = dbname
        self._client = client

    @classmethod
    def from_env(cls) -> "MongoDB":
        """Connect using MONGODB_URI and MONGODB_DATABASE and check the server answers."""
        uri = os.environ.get("MONGODB_URI", "")
        dbname = os.environ.get("MONGODB_DATABASE", "")
        try:
            client = pymongo.MongoClient(
                uri, serverSelectionTimeoutMS=_DB_TIMEOUT_MS, timeoutMS=_DB_TIMEOUT_MS
            )
        except (PyMongoError, ValueError) as err:
            log.error("unable to connect to the MongoDB database: %s", err)
            raise DatabaseInaccessibleError() from err
        try:
            client.admin.command("ping")
        except PyMongoError as err:
            log.error("unable to ping the MongoDB database: %s", err)
            client.close()
            raise DatabaseInaccessibleError() from err
        return cls(uri, dbname, client)

    @property
    def client(self) -> Any:
        return self._client

    def _collection(self, collection_name: str) -> Any:
        if self._client is None:
            try:
                self._client = pymongo.MongoClient(
                    self.uri, serverSelectionTimeoutMS=_DB_TIMEOUT_MS, timeoutMS=_DB_TIMEOUT_MS
                )
            except (PyMongoError, ValueError) as err:
                log.error("unable to connect to the MongoDB database: %s", err)
                raise DatabaseInaccessibleError() from err
        try:
            return self._client[self.dbname][collection_name]
        except PyMongoError as err:
            log.error("unable to access the collection %s: %s", collection_name, err)
            raise CollectionNotAccessibleError() from err

    def find_all_ids(self, collection_name: str, filter: Filter = None) -> list[str]:
        """Return the ID, as a string, of every matching document."""
        collection = self._collection(collection_name)
        try:
            docs = list(collection.find(_as_filter(filter), projection={"_id": 1}))
        except PyMongoError as err:
            log.error("failed to read the collection %s: %s", collection_name, err)
            raise CollectionNotAccessibleError() from err
        try:
            return [str(doc["_id"]) for doc in docs]
        except (KeyError, TypeError) as err:
            raise CollectionNotAccessibleError() from err

    def find_many(
        self,
        collection_name: str,
        filter: Filter = None,
        sort_by: SortSpec = None,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """Return the matching documents, sorted and limited as asked; a limit of 0 means none."""
        collection = self._collection(collection_name)
        options: dict[str, Any] = {"limit": limit}
        sort = _as_sort(sort_by)
        if sort:
            options["sort"] = sort
        try:
            docs = list(collection.find(_as_filter(filter), **options))
        except PyMongoError as err:
            log.debug("unable to find documents in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        if not all(isinstance(doc, Mapping) for doc in docs):
            log.error("unable to decode the documents in %s", collection_name)
            raise InvalidDocumentError()
        return [dict(doc) for doc in docs]

    def find_one(self, collection_name: str, filter: Filter = None) -> dict[str, Any]:
        """Return the first matching document, or raise DocumentNotFoundError."""
        collection = self._collection(collection_name)
        try:
            doc = collection.find_one(_as_filter(filter))
        except PyMongoError as err:
            log.debug("unable to find the document in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        if doc is None:
            log.debug("document not found in %s", collection_name)
            raise DocumentNotFoundError()
        if not isinstance(doc, Mapping):
            log.error("unable to decode the document in %s", collection_name)
            raise InvalidDocumentError()
        return dict(doc)

    def update_or_insert(
        self, collection_name: str, filter: Filter, data: Mapping[str, Any]
    ) -> None:
        """Set the fields of the first matching document, inserting one if none matches."""
        collection = self._collection(collection_name)
        try:
            collection.update_one(_as_filter(filter), {"$set": _as_update(data)}, upsert=True)
        except PyMongoError as err:
            log.error("unable to insert or update the document in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        log.debug("inserted or updated document in %s", collection_name)

    def update_many(
        self, collection_name: str, filter: Filter, data: Mapping[str, Any]
    ) -> None:
        """Set the fields of every matching document, inserting one if none matches."""
        collection = self._collection(collection_name)
        try:
            collection.update_many(_as_filter(filter), {"$set": _as_update(data)}, upsert=True)
        except PyMongoError as err:
            log.error("unable to update documents in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        log.debug("updated documents in %s", collection_name)

    def count(self, collection_name: str, filter: Filter = None) -> int:
        """Return how many documents match the filter."""
        collection = self._collection(collection_name)
        try:
            total = collection.count_documents(_as_filter(filter))
        except PyMongoError as err:
            log.error("failed to read the collection %s: %s", collection_name, err)
            raise CollectionNotAccessibleError() from err
        return int(total)

    def delete(self, collection_name: str, filter: Filter) -> int:
        """Delete the first matching document and return how many were removed."""
        collection = self._collection(collection_name)
        try:
            result = collection.delete_one(_as_filter(filter))
        except PyMongoError as err:
            log.error("unable to delete the document in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        if result.deleted_count == 0:
            log.warning("document not found in %s", collection_name)
        return int(result.deleted_count)

    def delete_many(self, collection_name: str, filter: Filter) -> int:
        """Delete every matching document and return how many were removed."""
        collection = self._collection(collection_name)
        try:
            result = collection.delete_many(_as_filter(filter))
        except PyMongoError as err:
            log.error("unable to delete documents in %s: %s", collection_name, err)
            raise DatabaseError(str(err)) from err
        if result.deleted_count == 0:
            log.warning("document not found in %s", collection_name)
        return int(result.deleted_count)

    def close(self) -> None:
        """Close the client connection."""
        if self._client is None:
            return
        try:
            self._client.close()
        except PyMongoError as err:
            log.error("unable to close the mongo database client: %s", err)
            raise DatabaseError(str(err)) from err
        finally:
            self._client = None

    def __str__(self) -> str:
        return "mongo"