"""
MongoDB document store.

Implements the DocumentStore port on top of pymongo. The blocking driver
calls run in worker threads through ``asgiref.sync.sync_to_async``, so one
thread-safe MongoClient serves every event loop (each request handled via
``async_to_sync`` runs on its own loop).

Translation rules:
- the domain key ``id`` maps to ``_id``; 24-hex strings become ObjectIds
- UpdateDefinition operations render to $set / $unset / $addToSet
- driver timeouts raise StoreTimeoutException, connection failures raise
  StoreUnavailableException; nothing is retried here
"""

from __future__ import annotations
import logging
from functools import wraps
from itertools import islice
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence

from asgiref.sync import sync_to_async
from bson import ObjectId
from pymongo import MongoClient
from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

from domain.inventory.repositories import (
    Document,
    DocumentQuery,
    DocumentStore,
    Filter,
)
from domain.shared.exceptions import StoreTimeoutException, StoreUnavailableException
from domain.shared.updates import UpdateDefinition, UpdateOperator
from domain.shared.value_objects import NodeKind

logger = logging.getLogger(__name__)

TIMEOUT_ERRORS = (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout, WTimeoutError)


def translate_errors(func):
    """Map driver exceptions onto the store exception types."""
    name = getattr(func, "__qualname__", repr(func))

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TIMEOUT_ERRORS as e:
            logger.error("MongoDB timeout in %s: %s", name, e)
            raise StoreTimeoutException(str(e)) from e
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable in %s: %s", name, e)
            raise StoreUnavailableException(str(e)) from e

    return wrapper


# =============================================================================
# TRANSLATION
# =============================================================================

def to_object_id(value: Any) -> Any:
    """Convert a 24-hex id string to an ObjectId, leaving anything else as is."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def _translate_id_condition(condition: Any) -> Any:
    if isinstance(condition, dict):
        return {
            op: [to_object_id(v) for v in arg] if op == "$in" else to_object_id(arg)
            for op, arg in condition.items()
        }
    return to_object_id(condition)


def to_mongo_filter(filter: Filter) -> Dict[str, Any]:
    """Rewrite a domain filter for MongoDB."""
    translated: Dict[str, Any] = {}
    for key, condition in filter.items():
        if key == "$and":
            translated[key] = [to_mongo_filter(sub) for sub in condition]
        elif key == "id":
            translated["_id"] = _translate_id_condition(condition)
        else:
            translated[key] = condition
    return translated


def to_mongo_document(document: Document) -> Dict[str, Any]:
    stored = {k: v for k, v in document.items() if k != "id"}
    if "id" in document:
        stored["_id"] = to_object_id(document["id"])
    return stored


def from_mongo_document(stored: Dict[str, Any]) -> Document:
    document = {k: v for k, v in stored.items() if k != "_id"}
    document["id"] = str(stored["_id"])
    return document


def render_update(update: UpdateDefinition) -> Dict[str, Dict[str, Any]]:
    """Render an UpdateDefinition as a MongoDB update document."""
    rendered: Dict[str, Dict[str, Any]] = {}
    for operation in update.operations:
        section = rendered.setdefault(operation.operator.value, {})
        if operation.operator is UpdateOperator.UNSET:
            section[operation.path.dotted] = ""
        else:
            section[operation.path.dotted] = operation.value
    return rendered


# =============================================================================
# STORE
# =============================================================================

class MongoQuery(DocumentQuery):
    """Query over a MongoDB collection."""

    def __init__(self, store: MongoDocumentStore, kind: NodeKind, filters: Sequence[Filter] = ()):
        super().__init__(kind, filters)
        self.store = store

    def _clone(self, filters: Sequence[Filter]) -> MongoQuery:
        return MongoQuery(self.store, self.kind, filters)

    async def batches(self, batch_size: Optional[int] = None) -> AsyncIterator[List[Document]]:
        size = batch_size or self.store.batch_size
        collection = self.store.collection(self.kind)
        cursor = collection.find(to_mongo_filter(self.filter), batch_size=size)

        @translate_errors
        def fetch() -> List[Document]:
            return [from_mongo_document(d) for d in islice(cursor, size)]

        try:
            while True:
                batch = await sync_to_async(fetch, thread_sensitive=False)()
                if not batch:
                    break
                yield batch
                if len(batch) < size:
                    break
        finally:
            await sync_to_async(cursor.close, thread_sensitive=False)()


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by a MongoDB database."""

    def __init__(
        self,
        connection_string: str,
        database: str,
        timeout_ms: int = 5000,
        batch_size: int = 100,
        client: Optional[MongoClient] = None,
    ):
        self.batch_size = batch_size
        self.client = client or MongoClient(
            connection_string,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
        )
        self.database = self.client[database]

    def collection(self, kind: NodeKind):
        return self.database[kind.collection]

    async def _run(self, func, *args, **kwargs):
        return await sync_to_async(translate_errors(func), thread_sensitive=False)(*args, **kwargs)

    def new_id(self) -> str:
        return str(ObjectId())

    def query(self, kind: NodeKind) -> MongoQuery:
        return MongoQuery(self, kind)

    async def insert_one(self, kind: NodeKind, document: Document) -> None:
        await self._run(self.collection(kind).insert_one, to_mongo_document(document))

    async def insert_many(self, kind: NodeKind, documents: Iterable[Document]) -> None:
        stored = [to_mongo_document(d) for d in documents]
        if not stored:
            return
        await self._run(self.collection(kind).insert_many, stored)

    async def update_one(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        if update.is_empty:
            return 0
        result = await self._run(
            self.collection(kind).update_one, to_mongo_filter(filter), render_update(update)
        )
        return result.matched_count

    async def update_many(self, kind: NodeKind, filter: Filter, update: UpdateDefinition) -> int:
        if update.is_empty:
            return 0
        result = await self._run(
            self.collection(kind).update_many, to_mongo_filter(filter), render_update(update)
        )
        return result.matched_count

    async def delete_one(self, kind: NodeKind, filter: Filter) -> int:
        result = await self._run(self.collection(kind).delete_one, to_mongo_filter(filter))
        return result.deleted_count

    async def delete_many(self, kind: NodeKind, filter: Filter) -> int:
        result = await self._run(self.collection(kind).delete_many, to_mongo_filter(filter))
        return result.deleted_count

    async def close(self) -> None:
        await sync_to_async(self.client.close, thread_sensitive=False)()
