"""Tests for field paths and update definitions."""

import pytest

from domain.shared.exceptions import InvalidPathException
from domain.shared.updates import (
    FieldPath,
    SetField,
    StackableUpdate,
    UnsetField,
    UpdateDefinition,
    UpdateOperator,
    add_item_to_set,
    remove_property,
    set_property,
    stack_updates,
)


# =============================================================================
# FieldPath
# =============================================================================

def test_join_without_prefix_addresses_root():
    assert FieldPath.join(None, "color").dotted == "color"


def test_join_with_prefix_uses_dot_notation():
    path = FieldPath.join("prop1.0", "nestedProp")
    assert path.segments == ("prop1", "0", "nestedProp")
    assert path.parent == ("prop1", "0")
    assert path.leaf == "nestedProp"


@pytest.mark.parametrize("dotted", ["", "a..b", ".a", "a."])
def test_empty_segments_are_rejected(dotted):
    with pytest.raises(InvalidPathException):
        FieldPath.parse(dotted)


def test_overlaps_is_strict_prefix():
    a = FieldPath.parse("address")
    b = FieldPath.parse("address.city")
    assert a.overlaps(b)
    assert b.overlaps(a)
    assert not a.overlaps(FieldPath.parse("address"))
    assert not a.overlaps(FieldPath.parse("addressLine"))


# =============================================================================
# UpdateDefinition
# =============================================================================

def test_definition_is_immutable_and_chainable():
    empty = UpdateDefinition()
    update = empty.set("color", "red").unset("material")

    assert empty.is_empty
    assert update.paths == ("color", "material")
    assert isinstance(update.operations[0], SetField)
    assert isinstance(update.operations[1], UnsetField)
    assert update.operations[1].operator is UpdateOperator.UNSET


def test_same_path_last_write_wins_in_place():
    update = UpdateDefinition().set("a", 1).set("b", 2).set("a", 3)

    assert update.paths == ("a", "b")
    assert update.operations[0].value == 3
    assert len(update) == 2


def test_nested_paths_conflict():
    with pytest.raises(InvalidPathException):
        UpdateDefinition().set("address", {}).set("address.city", "Oslo")


def test_combine_prefers_other():
    left = UpdateDefinition().set("color", "red")
    right = UpdateDefinition().set("color", "blue").set("material", "steel")

    combined = left.combine(right)

    assert combined.paths == ("color", "material")
    assert combined.operations[0].value == "blue"


# =============================================================================
# Stacked updates
# =============================================================================

def test_stack_updates_merges_into_one_set():
    update = stack_updates([
        StackableUpdate(None, "color", "red"),
        StackableUpdate("dimensions", "width", 10),
        StackableUpdate("items.2", "qty", 4),
    ])

    assert update.paths == ("color", "dimensions.width", "items.2.qty")
    assert all(op.operator is UpdateOperator.SET for op in update.operations)


def test_stack_updates_empty_is_empty():
    assert stack_updates([]).is_empty


def test_stack_updates_duplicate_path_later_entry_wins():
    update = stack_updates([
        StackableUpdate(None, "color", "red"),
        StackableUpdate(None, "color", "green"),
    ])

    assert len(update) == 1
    assert update.operations[0].value == "green"


def test_helpers_build_single_operations():
    assert set_property("a.b", "c", 1).operations == (SetField(FieldPath.parse("a.b.c"), 1),)
    assert remove_property(None, "parentId").operations == (UnsetField(FieldPath.parse("parentId")),)
    assert add_item_to_set("tags", "x").operations[0].operator is UpdateOperator.ADD_TO_SET
