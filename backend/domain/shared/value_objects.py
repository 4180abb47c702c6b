"""
Shared Value Objects used across the inventory domain.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import InvalidFilterCombinationException, ValidationException


# =============================================================================
# ENUMERATIONS
# =============================================================================

class NodeKind(str, Enum):
    """Kind of inventory node. The value is also the collection name."""

    ASSEMBLY = "Assembly"    # Composite node, may contain parts and assemblies
    PART = "Part"            # Leaf node

    @property
    def collection(self) -> str:
        return self.value

    @property
    def can_have_children(self) -> bool:
        return self is NodeKind.ASSEMBLY


# =============================================================================
# QUERY OPTIONS
# =============================================================================

@dataclass(frozen=True)
class DescendantsOptions:
    """
    Options for descendant enumeration below an assembly.

    first_level_only: direct children only (both kinds).
    leaves_only: suppress assemblies from the result.
    max_depth: stop expanding below this depth (1 = direct children).
    """

    first_level_only: bool = False
    leaves_only: bool = False
    max_depth: Optional[int] = None

    def validate(self) -> None:
        """Reject option combinations that cannot be honoured together."""
        if self.first_level_only and self.leaves_only:
            raise InvalidFilterCombinationException("firstLevelOnly", "componentPartsOnly")
        if self.first_level_only and self.max_depth is not None:
            raise InvalidFilterCombinationException("firstLevelOnly", "maxDepth")
        if self.max_depth is not None and self.max_depth < 1:
            raise ValidationException(
                "maxDepth must be at least 1", field="maxDepth", value=self.max_depth
            )


@dataclass(frozen=True)
class AssemblyListFilter:
    """Filter flags for listing assemblies."""

    top_level_only: bool = False
    sub_assemblies_only: bool = False

    def to_query(self) -> Dict[str, Any]:
        if self.top_level_only and self.sub_assemblies_only:
            raise InvalidFilterCombinationException("topLevelOnly", "subAssembliesOnly")
        if self.top_level_only:
            return {"parentId": None}
        if self.sub_assemblies_only:
            return {"parentId": {"$ne": None}}
        return {}


@dataclass(frozen=True)
class PartListFilter:
    """Filter flags for listing parts."""

    component_parts_only: bool = False
    orphan_parts_only: bool = False

    def to_query(self) -> Dict[str, Any]:
        if self.component_parts_only and self.orphan_parts_only:
            raise InvalidFilterCombinationException("componentPartsOnly", "orphanPartsOnly")
        if self.component_parts_only:
            return {"parentId": {"$ne": None}}
        if self.orphan_parts_only:
            return {"parentId": None}
        return {}
