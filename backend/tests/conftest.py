"""
Shared fixtures for the inventory test suite.

Every test gets a fresh in-memory document store; the API tests reach the
same instance through the store factory.
"""

import pytest
from rest_framework.test import APIClient

from application.services import InventoryService
from domain.inventory.hierarchy import HierarchyEngine
from domain.shared.value_objects import NodeKind
from infrastructure.persistence import factory
from infrastructure.persistence.memory import InMemoryDocumentStore


@pytest.fixture
def store():
    factory.reset_document_store()
    store = factory.get_document_store()
    assert isinstance(store, InMemoryDocumentStore)
    yield store
    factory.reset_document_store()


@pytest.fixture
def engine(store):
    return HierarchyEngine(store)


@pytest.fixture
def service(store):
    return InventoryService(store)


@pytest.fixture
def api_client(store):
    return APIClient()


@pytest.fixture
def seed(store):
    """Insert assemblies/parts directly: seed(kind, id, name, parent_id=None, **extra)."""

    def insert(kind: NodeKind, node_id: str, name: str = None, parent_id=None, **extra):
        document = {"id": node_id, "name": name or node_id, "parentId": parent_id}
        document.update(extra)
        store.collection(kind).append(document)
        return document

    return insert
