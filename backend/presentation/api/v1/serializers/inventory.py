"""
Inventory Serializers.

Request and response serializers for assemblies and parts. Nodes are plain
domain dataclasses, so these are non-model serializers.
"""

from rest_framework import serializers


# =============================================================================
# Response Serializers
# =============================================================================

class InventoryNodeSerializer(serializers.Serializer):
    """
    Serializer for an assembly or a part.

    Part attributes are omitted for assemblies.
    """

    kind = serializers.CharField(source='kind.value', read_only=True)
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    parentId = serializers.CharField(source='parent_id', read_only=True)
    color = serializers.CharField(read_only=True, required=False)
    material = serializers.CharField(read_only=True, required=False)


class TreeNodeSerializer(serializers.Serializer):
    """Serializer for a node with its nested children."""

    def to_representation(self, instance):
        data = InventoryNodeSerializer(instance.node).data
        data['children'] = TreeNodeSerializer(instance.children, many=True).data
        return data


# =============================================================================
# Request Serializers
# =============================================================================

class CreateAssemblyRequestSerializer(serializers.Serializer):
    """Body of POST /assemblies/."""

    name = serializers.CharField(max_length=255)


class CreatePartRequestSerializer(serializers.Serializer):
    """Body of POST /parts/."""

    name = serializers.CharField(max_length=255)
    color = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    material = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)


class UpdateParentRequestSerializer(serializers.Serializer):
    """Body of PUT /assemblies/{id}/ and PUT /parts/{id}/."""

    parentAssemblyId = serializers.CharField(required=False, allow_null=True, default=None)


class UpdatePartRequestSerializer(serializers.Serializer):
    """Body of PATCH /parts/{id}/. Only the supplied attributes change."""

    color = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    material = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)


# =============================================================================
# Query Parameter Serializers
# =============================================================================

class AssemblyListQuerySerializer(serializers.Serializer):
    topLevelOnly = serializers.BooleanField(required=False, default=False)
    subAssembliesOnly = serializers.BooleanField(required=False, default=False)


class PartListQuerySerializer(serializers.Serializer):
    componentPartsOnly = serializers.BooleanField(required=False, default=False)
    orphanPartsOnly = serializers.BooleanField(required=False, default=False)


class ChildrenQuerySerializer(serializers.Serializer):
    firstLevelOnly = serializers.BooleanField(required=False, default=False)
    componentPartsOnly = serializers.BooleanField(required=False, default=False)
    maxDepth = serializers.IntegerField(required=False, allow_null=True, default=None)

