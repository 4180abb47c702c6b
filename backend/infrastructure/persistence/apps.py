"""
Persistence app configuration.
"""

from django.apps import AppConfig


class PersistenceConfig(AppConfig):
    name = 'infrastructure.persistence'
    label = 'persistence'
    verbose_name = 'Inventory document store'

    def ready(self):
        from .factory import validate_store_settings

        # Missing connection settings abort startup
        validate_store_settings()
