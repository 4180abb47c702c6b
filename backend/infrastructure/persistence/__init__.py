"""
Persistence Package.

Document store adapters (MongoDB, in-memory) and management commands.
"""
