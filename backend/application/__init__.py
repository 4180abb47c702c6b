"""
Application Layer.

Use cases orchestrating the inventory domain.
"""
