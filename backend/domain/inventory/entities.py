"""
Inventory Domain - Entities.

Assemblies and parts are stored independently, one collection per kind.
Both satisfy the Node protocol (id, name, parent_id, kind); nothing else
is shared between them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union

from domain.shared.exceptions import ValidationException
from domain.shared.value_objects import NodeKind


PARENT_FIELD = "parentId"


class Node(Protocol):
    """Capability shared by every inventory node."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def parent_id(self) -> Optional[str]: ...

    @property
    def kind(self) -> NodeKind: ...

    def to_document(self) -> Dict[str, Any]: ...


def validate_name(name: Any) -> str:
    """Names are required and may not be blank."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationException("Name is required", field="name", value=name)
    return name


@dataclass(frozen=True)
class Assembly:
    """
    A composite inventory node.

    May contain parts and other assemblies; only assemblies can be parents.
    """

    id: str
    name: str
    parent_id: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.ASSEMBLY

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def to_document(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, PARENT_FIELD: self.parent_id}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> Assembly:
        return cls(
            id=str(document["id"]),
            name=document.get("name", ""),
            parent_id=document.get(PARENT_FIELD),
        )


@dataclass(frozen=True)
class Part:
    """A leaf inventory node."""

    id: str
    name: str
    parent_id: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.PART

    @property
    def is_orphan(self) -> bool:
        return self.parent_id is None

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            PARENT_FIELD: self.parent_id,
            "color": self.color,
            "material": self.material,
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> Part:
        return cls(
            id=str(document["id"]),
            name=document.get("name", ""),
            parent_id=document.get(PARENT_FIELD),
            color=document.get("color"),
            material=document.get("material"),
        )


InventoryNode = Union[Assembly, Part]


def node_from_document(kind: NodeKind, document: Dict[str, Any]) -> InventoryNode:
    """Build the record type matching ``kind``."""
    if kind is NodeKind.ASSEMBLY:
        return Assembly.from_document(document)
    return Part.from_document(document)


@dataclass
class TreeNode:
    """An assembly or part together with its nested children."""

    node: InventoryNode
    children: List[TreeNode] = field(default_factory=list)

    def count(self) -> int:
        """Number of nodes in this subtree, including the root."""
        return 1 + sum(child.count() for child in self.children)


@dataclass
class HierarchyReport:
    """Result of a hierarchy consistency audit."""

    dangling_references: List[Dict[str, Any]] = field(default_factory=list)
    part_parents: List[Dict[str, Any]] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not (self.dangling_references or self.part_parents or self.cycles)

    @property
    def issues_count(self) -> int:
        return len(self.dangling_references) + len(self.part_parents) + len(self.cycles)
