"""
Inventory Domain - Hierarchy Engine.

Tree operations over the assembly/part forest:
- ancestor chain resolution (nearest parent first)
- descendant enumeration (breadth-first, optionally depth-limited,
  optionally parts only)
- nested subtree construction
- re-parenting
- delete with orphaning of direct children
- consistency audit

Every traversal keeps a visited set, so malformed data (a parent cycle)
cannot make it loop forever. A detected cycle ends that branch of the
traversal and is logged; reads never fail because of it.
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Set, Tuple

from domain.shared.updates import remove_property, set_property
from domain.shared.value_objects import DescendantsOptions, NodeKind

from .entities import (
    PARENT_FIELD,
    Assembly,
    HierarchyReport,
    InventoryNode,
    Part,
    TreeNode,
    node_from_document,
)
from .repositories import DocumentStore

logger = logging.getLogger(__name__)


class HierarchyEngine:
    """Traversal and consistency operations over one document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    async def _parent_of(self, kind: NodeKind, node_id: str) -> Tuple[bool, Optional[str]]:
        """Resolve a node's parent id; the flag is False when the node is missing."""
        document = await self.store.query(kind).where({"id": node_id}).first()
        if document is None:
            return False, None
        return True, document.get(PARENT_FIELD)

    async def _child_assemblies(self, assembly_id: str) -> List[Assembly]:
        documents = await self.store.query(NodeKind.ASSEMBLY).where(
            {PARENT_FIELD: assembly_id}
        ).to_list()
        return [Assembly.from_document(d) for d in documents]

    async def _child_parts(self, assembly_id: str) -> List[Part]:
        documents = await self.store.query(NodeKind.PART).where(
            {PARENT_FIELD: assembly_id}
        ).to_list()
        return [Part.from_document(d) for d in documents]

    # =========================================================================
    # TREE NAVIGATION
    # =========================================================================

    async def ancestor_chain(self, kind: NodeKind, node_id: str) -> List[str]:
        """
        Get the ids of a node's ancestors, nearest parent first.

        The chain ends at a node without a parent, or at a parent id that
        does not resolve to any assembly (treated as a root).
        """
        exists, parent_id = await self._parent_of(kind, node_id)
        if not exists:
            return []

        chain: List[str] = []
        visited: Set[str] = {node_id} if kind is NodeKind.ASSEMBLY else set()

        while parent_id is not None:
            if parent_id in visited:
                logger.warning(
                    "Cycle in ancestors of %s %s at assembly %s", kind.value, node_id, parent_id
                )
                break
            visited.add(parent_id)
            chain.append(parent_id)

            # Only assemblies can be parents
            exists, next_parent_id = await self._parent_of(NodeKind.ASSEMBLY, parent_id)
            if not exists:
                break
            parent_id = next_parent_id

        return chain

    async def descendants(
        self,
        assembly_id: str,
        options: Optional[DescendantsOptions] = None,
    ) -> List[InventoryNode]:
        """
        Get the assemblies and parts below an assembly as a flat list.

        Ordering is not guaranteed.
        """
        options = options or DescendantsOptions()
        options.validate()

        children: List[InventoryNode] = []
        children.extend(await self._child_parts(assembly_id))

        if options.first_level_only:
            children.extend(await self._child_assemblies(assembly_id))
            return children

        visited: Set[str] = {assembly_id}
        frontier: Deque[Tuple[Assembly, int]] = deque(
            (child, 1) for child in await self._child_assemblies(assembly_id)
        )

        while frontier:
            assembly, depth = frontier.popleft()
            if assembly.id in visited:
                logger.warning("Assembly %s reached twice below %s", assembly.id, assembly_id)
                continue
            visited.add(assembly.id)

            if not options.leaves_only:
                children.append(assembly)

            if options.max_depth is not None and depth >= options.max_depth:
                continue

            for child in await self._child_assemblies(assembly.id):
                frontier.append((child, depth + 1))
            children.extend(await self._child_parts(assembly.id))

        return children

    async def subtree(self, assembly_id: str) -> Optional[TreeNode]:
        """Get an assembly with everything below it as a nested tree."""
        document = await self.store.query(NodeKind.ASSEMBLY).where({"id": assembly_id}).first()
        if document is None:
            return None

        root = TreeNode(node_from_document(NodeKind.ASSEMBLY, document))
        visited: Set[str] = {assembly_id}
        frontier: Deque[TreeNode] = deque([root])

        while frontier:
            current = frontier.popleft()
            for part in await self._child_parts(current.node.id):
                current.children.append(TreeNode(part))
            for assembly in await self._child_assemblies(current.node.id):
                if assembly.id in visited:
                    logger.warning("Assembly %s reached twice below %s", assembly.id, assembly_id)
                    continue
                visited.add(assembly.id)
                child = TreeNode(assembly)
                current.children.append(child)
                frontier.append(child)

        return root

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def reparent(self, kind: NodeKind, node_id: str, new_parent_id: Optional[str]) -> None:
        """
        Point a node at a new parent assembly, or make it top-level.

        No existence or cycle checks are made here.
        """
        if new_parent_id is None:
            update = remove_property(None, PARENT_FIELD)
        else:
            update = set_property(None, PARENT_FIELD, new_parent_id)
        await self.store.update_one(kind, {"id": node_id}, update)

    async def delete_cascade_orphan(self, kind: NodeKind, node_id: str) -> None:
        """
        Delete a node and clear the parent reference of its direct children.

        An assembly delete runs as three separate store calls (orphan parts,
        orphan assemblies, delete the node). A concurrent reader may observe
        any intermediate state, and a failure leaves the completed steps in
        place. Parts are leaves, so a part delete is a single call; an
        assembly that shares the part's id keeps its children.
        """
        orphaned_parts = orphaned_assemblies = 0
        if kind.can_have_children:
            clear_parent = set_property(None, PARENT_FIELD, None)
            orphaned_parts = await self.store.update_many(
                NodeKind.PART, {PARENT_FIELD: node_id}, clear_parent
            )
            orphaned_assemblies = await self.store.update_many(
                NodeKind.ASSEMBLY, {PARENT_FIELD: node_id}, clear_parent
            )
        deleted = await self.store.delete_one(kind, {"id": node_id})

        logger.info(
            "Deleted %s %s (deleted=%d, orphaned parts=%d, orphaned assemblies=%d)",
            kind.value, node_id, deleted, orphaned_parts, orphaned_assemblies
        )

    # =========================================================================
    # VALIDATION
    # =========================================================================

    async def find_inconsistencies(self) -> HierarchyReport:
        """
        Audit the whole forest.

        Checks:
        - parent references that do not resolve to an assembly
        - parent references that point at a part
        - assembly parent cycles
        """
        report = HierarchyReport()

        assembly_parents: Dict[str, Optional[str]] = {}
        async for document in self.store.query(NodeKind.ASSEMBLY):
            assembly_parents[str(document["id"])] = document.get(PARENT_FIELD)
        part_ids: Set[str] = set()
        part_parents: Dict[str, Optional[str]] = {}
        async for document in self.store.query(NodeKind.PART):
            part_ids.add(str(document["id"]))
            part_parents[str(document["id"])] = document.get(PARENT_FIELD)

        for kind, parents in ((NodeKind.ASSEMBLY, assembly_parents), (NodeKind.PART, part_parents)):
            for node_id, parent_id in parents.items():
                if parent_id is None or parent_id in assembly_parents:
                    continue
                issue = {"kind": kind.value, "id": node_id, "parent_id": parent_id}
                if parent_id in part_ids:
                    report.part_parents.append(issue)
                else:
                    report.dangling_references.append(issue)

        report.cycles = _find_cycles(assembly_parents)

        logger.info("Hierarchy audit: %d issues found", report.issues_count)
        return report


def _find_cycles(parents: Dict[str, Optional[str]]) -> List[List[str]]:
    """Find every distinct cycle in an assembly -> parent mapping."""
    cycles: List[List[str]] = []
    settled: Set[str] = set()

    for start in parents:
        path: List[str] = []
        on_path: Dict[str, int] = {}
        current: Optional[str] = start
        while current is not None and current in parents and current not in settled:
            if current in on_path:
                cycles.append(path[on_path[current]:])
                break
            on_path[current] = len(path)
            path.append(current)
            current = parents[current]
        settled.update(path)

    return cycles
