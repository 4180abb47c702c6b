"""
Base Views.

Common viewset behaviour shared by assemblies and parts: read one,
reparent, delete and ancestor chain.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from application.services import InventoryService
from domain.shared.value_objects import NodeKind
from infrastructure.persistence.factory import get_document_store
from ..serializers.inventory import (
    InventoryNodeSerializer,
    UpdateParentRequestSerializer,
)


class InventoryViewSet(viewsets.ViewSet):
    """
    Base viewset for one node kind.

    The service layer is asynchronous; each handler runs it to completion
    with ``async_to_sync``.

    Endpoints:
    - GET /{kind}/{id}/ - read one node
    - PUT /{kind}/{id}/ - reparent
    - DELETE /{kind}/{id}/ - delete and orphan children
    - GET /{kind}/{id}/parent/ - ancestor ids, nearest first
    """

    kind: NodeKind = None

    def get_service(self) -> InventoryService:
        return InventoryService(get_document_store())

    def run(self, coroutine_function, *args, **kwargs):
        return async_to_sync(coroutine_function)(*args, **kwargs)

    def validated_query(self, serializer_class):
        """Parse query parameters, raising a 400 on malformed values."""
        serializer = serializer_class(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def validated_body(self, serializer_class):
        serializer = serializer_class(data=self.request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @extend_schema(
        responses={200: InventoryNodeSerializer, 404: OpenApiResponse(description='Not found')}
    )
    def retrieve(self, request, pk=None):
        """Get one node."""
        node = self.run(self.get_service().get, self.kind, pk)
        if node is None:
            return Response(status=status.HTTP_404_NOT_FOUND)
        return Response(InventoryNodeSerializer(node).data)

    @extend_schema(request=UpdateParentRequestSerializer, responses={204: None})
    def update(self, request, pk=None):
        """Move the node under another assembly, or to the top level."""
        data = self.validated_body(UpdateParentRequestSerializer)
        self.run(self.get_service().reparent, self.kind, pk, data['parentAssemblyId'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={204: None})
    def destroy(self, request, pk=None):
        """Delete the node; its direct children become top-level."""
        self.run(self.get_service().delete, self.kind, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: serializers.ListField(child=serializers.CharField())})
    @action(detail=True, methods=['get'])
    def parent(self, request, pk=None):
        """Get the ancestor ids of the node, nearest first."""
        chain = self.run(self.get_service().ancestors, self.kind, pk)
        return Response(chain)
