"""
Part Views.

API views for parts.
"""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.response import Response

from domain.shared.value_objects import NodeKind
from .base import InventoryViewSet
from ..serializers.inventory import (
    CreatePartRequestSerializer,
    InventoryNodeSerializer,
    PartListQuerySerializer,
    UpdatePartRequestSerializer,
)


@extend_schema_view(
    list=extend_schema(parameters=[PartListQuerySerializer]),
    create=extend_schema(
        request=CreatePartRequestSerializer,
        responses={201: InventoryNodeSerializer},
    ),
    partial_update=extend_schema(
        request=UpdatePartRequestSerializer,
        responses={204: None},
    ),
)
class PartViewSet(InventoryViewSet):
    """
    ViewSet for parts.

    Endpoints:
    - GET /parts/ - list (componentPartsOnly / orphanPartsOnly)
    - POST /parts/ - create an orphan part
    - PATCH /parts/{id}/ - change color and/or material
    """

    kind = NodeKind.PART

    def list(self, request):
        params = self.validated_query(PartListQuerySerializer)
        parts = self.run(
            self.get_service().list_parts,
            component_parts_only=params['componentPartsOnly'],
            orphan_parts_only=params['orphanPartsOnly'],
        )
        return Response(InventoryNodeSerializer(parts, many=True).data)

    def create(self, request):
        data = self.validated_body(CreatePartRequestSerializer)
        part = self.run(
            self.get_service().create_part,
            data['name'],
            color=data.get('color'),
            material=data.get('material'),
        )
        return Response(InventoryNodeSerializer(part).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        data = self.validated_body(UpdatePartRequestSerializer)
        self.run(self.get_service().update_part_attributes, pk, **data)
        return Response(status=status.HTTP_204_NO_CONTENT)
