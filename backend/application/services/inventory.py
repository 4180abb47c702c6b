"""
Inventory Service.

Create/read/list/reparent/delete operations for assemblies and parts,
built on the document store and the hierarchy engine.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from domain.inventory.entities import (
    Assembly,
    InventoryNode,
    Part,
    TreeNode,
    node_from_document,
    validate_name,
)
from domain.inventory.hierarchy import HierarchyEngine
from domain.inventory.repositories import DocumentStore
from domain.shared.exceptions import (
    CircularReferenceException,
    EntityNotFoundException,
)
from domain.shared.updates import StackableUpdate
from domain.shared.value_objects import (
    AssemblyListFilter,
    DescendantsOptions,
    NodeKind,
    PartListFilter,
)

logger = logging.getLogger(__name__)

_UNCHANGED = object()


class InventoryService:
    """Entry point used by the API and management commands."""

    def __init__(self, store: DocumentStore, hierarchy: Optional[HierarchyEngine] = None):
        self.store = store
        self.hierarchy = hierarchy or HierarchyEngine(store)

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_assembly(self, name: str) -> Assembly:
        assembly = Assembly(id=self.store.new_id(), name=validate_name(name))
        await self.store.insert_one(NodeKind.ASSEMBLY, assembly.to_document())
        logger.info("Created assembly %s '%s'", assembly.id, assembly.name)
        return assembly

    async def create_part(
        self,
        name: str,
        color: Optional[str] = None,
        material: Optional[str] = None,
    ) -> Part:
        part = Part(
            id=self.store.new_id(),
            name=validate_name(name),
            color=color,
            material=material,
        )
        await self.store.insert_one(NodeKind.PART, part.to_document())
        logger.info("Created part %s '%s'", part.id, part.name)
        return part

    # =========================================================================
    # READ
    # =========================================================================

    async def get(self, kind: NodeKind, node_id: str) -> Optional[InventoryNode]:
        """Get a node by id, or None when it does not exist."""
        document = await self.store.query(kind).where({"id": node_id}).first()
        if document is None:
            return None
        return node_from_document(kind, document)

    async def get_assembly(self, assembly_id: str) -> Optional[Assembly]:
        return await self.get(NodeKind.ASSEMBLY, assembly_id)

    async def get_part(self, part_id: str) -> Optional[Part]:
        return await self.get(NodeKind.PART, part_id)

    async def list_assemblies(
        self,
        top_level_only: bool = False,
        sub_assemblies_only: bool = False,
    ) -> List[Assembly]:
        filter = AssemblyListFilter(top_level_only, sub_assemblies_only).to_query()
        documents = await self.store.query(NodeKind.ASSEMBLY).where(filter).to_list()
        return [Assembly.from_document(d) for d in documents]

    async def list_parts(
        self,
        component_parts_only: bool = False,
        orphan_parts_only: bool = False,
    ) -> List[Part]:
        filter = PartListFilter(component_parts_only, orphan_parts_only).to_query()
        documents = await self.store.query(NodeKind.PART).where(filter).to_list()
        return [Part.from_document(d) for d in documents]

    async def children(
        self,
        assembly_id: str,
        first_level_only: bool = False,
        component_parts_only: bool = False,
        max_depth: Optional[int] = None,
    ) -> List[InventoryNode]:
        options = DescendantsOptions(
            first_level_only=first_level_only,
            leaves_only=component_parts_only,
            max_depth=max_depth,
        )
        return await self.hierarchy.descendants(assembly_id, options)

    async def tree(self, assembly_id: str) -> Optional[TreeNode]:
        return await self.hierarchy.subtree(assembly_id)

    async def ancestors(self, kind: NodeKind, node_id: str) -> List[str]:
        return await self.hierarchy.ancestor_chain(kind, node_id)

    # =========================================================================
    # UPDATE
    # =========================================================================

    async def reparent(
        self,
        kind: NodeKind,
        node_id: str,
        parent_assembly_id: Optional[str],
    ) -> None:
        """
        Move a node under another assembly, or to the top level.

        The new parent must be an existing assembly, and an assembly cannot
        be moved below itself or one of its descendants.
        """
        if parent_assembly_id is not None:
            await self._check_parent(kind, node_id, parent_assembly_id)

        await self.hierarchy.reparent(kind, node_id, parent_assembly_id)
        logger.info("Reparented %s %s under %s", kind.value, node_id, parent_assembly_id)

    async def _check_parent(self, kind: NodeKind, node_id: str, parent_assembly_id: str) -> None:
        if kind is NodeKind.ASSEMBLY and parent_assembly_id == node_id:
            raise CircularReferenceException([node_id])

        if await self.get_assembly(parent_assembly_id) is None:
            raise EntityNotFoundException(NodeKind.ASSEMBLY.value, parent_assembly_id)

        if kind is NodeKind.ASSEMBLY:
            # The node must not already be an ancestor of its new parent
            chain = await self.hierarchy.ancestor_chain(NodeKind.ASSEMBLY, parent_assembly_id)
            if node_id in chain:
                cycle = [node_id] + chain[:chain.index(node_id)] + [parent_assembly_id]
                raise CircularReferenceException(cycle)

    async def update_part_attributes(
        self,
        part_id: str,
        color: object = _UNCHANGED,
        material: object = _UNCHANGED,
    ) -> None:
        """Set the given part attributes in one store call."""
        entries = [
            StackableUpdate(None, field_name, value)
            for field_name, value in (("color", color), ("material", material))
            if value is not _UNCHANGED
        ]
        if not entries:
            return
        await self.store.update_stacked(NodeKind.PART, {"id": part_id}, entries)
        logger.info("Updated part %s: %s", part_id, ", ".join(e.property_name for e in entries))

    # =========================================================================
    # DELETE
    # =========================================================================

    async def delete(self, kind: NodeKind, node_id: str) -> None:
        """Delete a node; its direct children become top-level."""
        await self.hierarchy.delete_cascade_orphan(kind, node_id)
