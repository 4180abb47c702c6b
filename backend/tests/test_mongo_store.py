"""
Tests for the MongoDB document store.

The driver is replaced by MagicMock; these cover translation and error
mapping, not a live server.
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from domain.shared.exceptions import StoreTimeoutException, StoreUnavailableException
from domain.shared.updates import StackableUpdate, UpdateDefinition
from domain.shared.value_objects import NodeKind
from infrastructure.persistence.mongo import (
    MongoDocumentStore,
    from_mongo_document,
    render_update,
    to_mongo_document,
    to_mongo_filter,
)

OID = "65a1f0c2e4b0a1b2c3d4e5f6"


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def mongo_store(client):
    return MongoDocumentStore("mongodb://unused", "inventory", batch_size=2, client=client)


def collection_of(client, kind):
    return client["inventory"][kind.collection]


# =============================================================================
# Translation
# =============================================================================

def test_filter_maps_id_to_object_id():
    assert to_mongo_filter({"id": OID, "parentId": None}) == {"_id": ObjectId(OID), "parentId": None}
    assert to_mongo_filter({"id": {"$in": [OID, "custom"]}}) == {"_id": {"$in": [ObjectId(OID), "custom"]}}
    assert to_mongo_filter({"$and": [{"id": OID}]}) == {"$and": [{"_id": ObjectId(OID)}]}


def test_document_round_trip_keeps_string_ids():
    stored = to_mongo_document({"id": OID, "name": "Bolt", "parentId": OID})

    assert stored["_id"] == ObjectId(OID)
    assert stored["parentId"] == OID
    assert from_mongo_document(stored) == {"id": OID, "name": "Bolt", "parentId": OID}


def test_render_update_groups_operators():
    update = UpdateDefinition().set("color", "red").set("dims.width", 3).unset("parentId").add_to_set("tags", "x")

    assert render_update(update) == {
        "$set": {"color": "red", "dims.width": 3},
        "$unset": {"parentId": ""},
        "$addToSet": {"tags": "x"},
    }


# =============================================================================
# Store calls
# =============================================================================

async def test_update_stacked_issues_one_update_one(mongo_store, client):
    collection = collection_of(client, NodeKind.PART)
    collection.update_one.return_value = MagicMock(matched_count=1)

    matched = await mongo_store.update_stacked(NodeKind.PART, {"id": OID}, [
        StackableUpdate(None, "color", "red"),
        StackableUpdate(None, "material", "steel"),
    ])

    assert matched == 1
    collection.update_one.assert_called_once_with(
        {"_id": ObjectId(OID)}, {"$set": {"color": "red", "material": "steel"}}
    )


async def test_empty_update_skips_driver(mongo_store, client):
    assert await mongo_store.update_many(NodeKind.PART, {}, UpdateDefinition()) == 0
    collection_of(client, NodeKind.PART).update_many.assert_not_called()


async def test_query_reads_in_batches_and_closes_cursor(mongo_store, client):
    cursor = MagicMock()
    cursor.__iter__.return_value = iter([
        {"_id": ObjectId(OID), "name": "a"},
        {"_id": "p2", "name": "b"},
        {"_id": "p3", "name": "c"},
    ])
    collection_of(client, NodeKind.PART).find.return_value = cursor

    batches = [batch async for batch in mongo_store.query(NodeKind.PART).where({"parentId": None}).batches()]

    assert [[d["id"] for d in b] for b in batches] == [[OID, "p2"], ["p3"]]
    collection_of(client, NodeKind.PART).find.assert_called_once_with({"parentId": None}, batch_size=2)
    cursor.close.assert_called_once()


async def test_timeout_maps_to_store_timeout(mongo_store, client, caplog):
    collection_of(client, NodeKind.ASSEMBLY).insert_one.side_effect = ServerSelectionTimeoutError("no servers")

    with pytest.raises(StoreTimeoutException):
        await mongo_store.insert_one(NodeKind.ASSEMBLY, {"id": OID, "name": "x"})
    assert "MongoDB timeout in" in caplog.text


async def test_connection_failure_maps_to_store_unavailable(mongo_store, client, caplog):
    collection_of(client, NodeKind.ASSEMBLY).delete_one.side_effect = AutoReconnect("reset")

    with pytest.raises(StoreUnavailableException):
        await mongo_store.delete_one(NodeKind.ASSEMBLY, {"id": OID})
    assert "MongoDB unavailable in" in caplog.text


def test_new_id_is_object_id_string(mongo_store):
    assert ObjectId.is_valid(mongo_store.new_id())
