"""
Inventory Domain - Assemblies and Parts.

This domain handles the hierarchical inventory forest:
- Assemblies contain Parts and other Assemblies
- Parts are leaves
- Deleting an Assembly orphans its direct children
"""
