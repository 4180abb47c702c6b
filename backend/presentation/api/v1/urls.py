"""
API v1 URL Configuration.

All API endpoints for version 1.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views.assemblies import AssemblyViewSet
from .views.parts import PartViewSet

# Create router
router = DefaultRouter(trailing_slash='/?')

# Inventory hierarchy
router.register(r'assemblies', AssemblyViewSet, basename='assemblies')
router.register(r'parts', PartViewSet, basename='parts')

app_name = 'api_v1'

urlpatterns = [
    path('', include(router.urls)),
]
