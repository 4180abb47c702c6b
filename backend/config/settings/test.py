"""
Test settings for the inventory service.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['*']

SECRET_KEY = 'test-secret-key'

# =============================================================================
# DOCUMENT STORE - Tests use the in-memory store
# =============================================================================
DOCUMENT_STORE_BACKEND = 'memory'
MONGODB_CONNECTION_STRING = ''
MONGODB_DATABASE = ''

# =============================================================================
# LOGGING - Tests
# =============================================================================
LOGGING['root']['level'] = 'WARNING'
for _package in ('domain', 'application', 'infrastructure', 'presentation'):
    LOGGING['loggers'][_package]['level'] = 'WARNING'
    LOGGING['loggers'][_package]['handlers'] = []
    LOGGING['loggers'][_package]['propagate'] = True

# =============================================================================
# REST FRAMEWORK - Tests
# =============================================================================
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = [
    'rest_framework.renderers.JSONRenderer',
]
