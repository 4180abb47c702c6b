"""
Serializers Package.

All API serializers for the inventory service.
"""

from .inventory import (
    InventoryNodeSerializer,
    TreeNodeSerializer,
    CreateAssemblyRequestSerializer,
    CreatePartRequestSerializer,
    UpdateParentRequestSerializer,
    UpdatePartRequestSerializer,
    AssemblyListQuerySerializer,
    PartListQuerySerializer,
    ChildrenQuerySerializer,
)

__all__ = [
    'InventoryNodeSerializer',
    'TreeNodeSerializer',
    'CreateAssemblyRequestSerializer',
    'CreatePartRequestSerializer',
    'UpdateParentRequestSerializer',
    'UpdatePartRequestSerializer',
    'AssemblyListQuerySerializer',
    'PartListQuerySerializer',
    'ChildrenQuerySerializer',
]
