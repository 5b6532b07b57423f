# config/settings/test.py

from .base import *

# === TESTS ===

DEBUG = False

SECRET_KEY = 'test-secret-key'

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'boardflow-test-cache',
    }
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

# No output in tests; records still reach pytest's caplog through the root logger
LOGGING['handlers'] = {
    'null': {'class': 'logging.NullHandler'},
}
LOGGING['root'] = {'handlers': ['null'], 'level': 'WARNING'}
LOGGING['loggers'] = {
    'apps': {'handlers': ['null'], 'level': 'DEBUG', 'propagate': True},
}

BOARDFLOW_EVENTS_ENABLED = True
BOARDFLOW_EVENTS_TIMEOUT = 1.0
