"""
Document store factory.

Builds the process-wide DocumentStore from Django settings.
"""

from __future__ import annotations
import logging
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from domain.inventory.repositories import DocumentStore

logger = logging.getLogger(__name__)

BACKEND_MONGO = 'mongo'
BACKEND_MEMORY = 'memory'
BACKENDS = (BACKEND_MONGO, BACKEND_MEMORY)

_store: Optional[DocumentStore] = None


def validate_store_settings() -> None:
    """Fail fast on missing or unknown document store settings."""
    backend = settings.DOCUMENT_STORE_BACKEND
    if backend not in BACKENDS:
        raise ImproperlyConfigured(
            f"DOCUMENT_STORE_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'"
        )
    if backend == BACKEND_MONGO:
        for name in ('MONGODB_CONNECTION_STRING', 'MONGODB_DATABASE'):
            if not getattr(settings, name, ''):
                raise ImproperlyConfigured(f"Error configuring the document store: {name} is required")


def build_document_store() -> DocumentStore:
    """Create a new store for the configured backend."""
    validate_store_settings()
    backend = settings.DOCUMENT_STORE_BACKEND

    if backend == BACKEND_MEMORY:
        from .memory import InMemoryDocumentStore
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore(batch_size=settings.DOCUMENT_STORE_BATCH_SIZE)

    from .mongo import MongoDocumentStore
    logger.info("Using MongoDB document store, database '%s'", settings.MONGODB_DATABASE)
    return MongoDocumentStore(
        connection_string=settings.MONGODB_CONNECTION_STRING,
        database=settings.MONGODB_DATABASE,
        timeout_ms=settings.MONGODB_TIMEOUT_MS,
        batch_size=settings.DOCUMENT_STORE_BATCH_SIZE,
    )


def get_document_store() -> DocumentStore:
    """Get the shared store, creating it on first use."""
    global _store
    if _store is None:
        _store = build_document_store()
    return _store


def reset_document_store() -> None:
    """Drop the shared store so the next call rebuilds it from settings."""
    global _store
    _store = None
