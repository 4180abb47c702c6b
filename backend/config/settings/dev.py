"""
Development settings for the inventory service.
"""

from .base import *

# =============================================================================
# DEBUG
# =============================================================================
DEBUG = True

# =============================================================================
# ALLOWED HOSTS
# =============================================================================
ALLOWED_HOSTS = ['*']

# =============================================================================
# DOCUMENT STORE - Development Override
# =============================================================================
# Local MongoDB unless DOCUMENT_STORE_BACKEND=memory is set
MONGODB_CONNECTION_STRING = config('MONGODB_CONNECTION_STRING', default='mongodb://127.0.0.1:27017')
MONGODB_DATABASE = config('MONGODB_DATABASE', default='inventory')

# =============================================================================
# REST FRAMEWORK - Development (Browsable API)
# =============================================================================
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = [
    'rest_framework.renderers.JSONRenderer',
    'rest_framework.renderers.BrowsableAPIRenderer',
]

# =============================================================================
# LOGGING - Development
# =============================================================================
LOGGING['root']['level'] = 'DEBUG'
for _package in ('domain', 'application', 'infrastructure', 'presentation'):
    LOGGING['loggers'][_package]['level'] = 'DEBUG'
