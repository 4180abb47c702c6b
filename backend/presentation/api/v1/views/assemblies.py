"""
Assembly Views.

API views for assemblies and their hierarchy.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from domain.shared.value_objects import NodeKind
from .base import InventoryViewSet
from ..serializers.inventory import (
    AssemblyListQuerySerializer,
    ChildrenQuerySerializer,
    CreateAssemblyRequestSerializer,
    InventoryNodeSerializer,
    TreeNodeSerializer,
)


@extend_schema_view(
    list=extend_schema(parameters=[AssemblyListQuerySerializer]),
    create=extend_schema(
        request=CreateAssemblyRequestSerializer,
        responses={201: InventoryNodeSerializer},
    ),
)
class AssemblyViewSet(InventoryViewSet):
    """
    ViewSet for assemblies.

    Endpoints:
    - GET /assemblies/ - list (topLevelOnly / subAssembliesOnly)
    - POST /assemblies/ - create a top-level assembly
    - GET /assemblies/{id}/children/ - flattened descendants
    - GET /assemblies/{id}/tree/ - nested descendants
    """

    kind = NodeKind.ASSEMBLY

    def list(self, request):
        params = self.validated_query(AssemblyListQuerySerializer)
        assemblies = self.run(
            self.get_service().list_assemblies,
            top_level_only=params['topLevelOnly'],
            sub_assemblies_only=params['subAssembliesOnly'],
        )
        return Response(InventoryNodeSerializer(assemblies, many=True).data)

    def create(self, request):
        data = self.validated_body(CreateAssemblyRequestSerializer)
        assembly = self.run(self.get_service().create_assembly, data['name'])
        return Response(InventoryNodeSerializer(assembly).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[ChildrenQuerySerializer],
        responses={200: InventoryNodeSerializer(many=True)},
    )
    @action(detail=True, methods=['get'])
    def children(self, request, pk=None):
        """
        Get every assembly and part below this assembly.

        firstLevelOnly limits the result to direct children, componentPartsOnly
        to parts at any depth, and maxDepth bounds the walk.
        """
        params = self.validated_query(ChildrenQuerySerializer)
        nodes = self.run(
            self.get_service().children,
            pk,
            first_level_only=params['firstLevelOnly'],
            component_parts_only=params['componentPartsOnly'],
            max_depth=params['maxDepth'],
        )
        return Response(InventoryNodeSerializer(nodes, many=True).data)

    @extend_schema(
        responses={200: TreeNodeSerializer, 404: OpenApiResponse(description='Not found')}
    )
    @action(detail=True, methods=['get'])
    def tree(self, request, pk=None):
        """Get this assembly with its descendants nested under it."""
        root = self.run(self.get_service().tree, pk)
        if root is None:
            return Response(status=status.HTTP_404_NOT_FOUND)
        return Response(TreeNodeSerializer(root).data)
