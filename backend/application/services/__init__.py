"""
Application Services.
"""

from .inventory import InventoryService

__all__ = ['InventoryService']
