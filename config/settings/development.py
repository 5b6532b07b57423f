# config/settings/development.py

from .base import *

# === DEVELOPMENT ===

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# === DATABASE ===

# PostgreSQL by default (same as production)
if env('DATABASE_URL', default=None):
    import dj_database_url

    DATABASES['default'] = dj_database_url.parse(env('DATABASE_URL'), conn_max_age=600)

# SQLite fallback only when explicitly requested
if env('USE_SQLITE', cast=bool, default=False):
    print("🔄 Using SQLite for development")
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    print(f"🐘 Using PostgreSQL: {DATABASES['default']['NAME']}@{DATABASES['default']['HOST']}")

# === VERBOSE LOGGING ===

LOGGING['handlers']['console']['level'] = 'DEBUG'
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['apps']['level'] = 'DEBUG'

# === CACHE & CHANNELS ===

# No Redis required in development
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'boardflow-dev-cache',
    }
}

# Use Redis when available
if env('REDIS_URL', default=None):
    CACHES['default'] = {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': env('REDIS_URL'),
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        }
    }
    print("🔴 Redis cache enabled")

# In-memory channel layer: events only reach consumers of this process
CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

# Relaxed cookies for local work
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# shell_plus
SHELL_PLUS_IMPORTS = [
    'from apps.core.hierarchy_service import hierarchy_service',
    'from apps.core.aggregation import build_board_view',
]

print("🚀 DEVELOPMENT settings loaded")
print(f"🔑 DEBUG: {DEBUG}")
print(f"📨 Events topic: {BOARDFLOW_EVENTS_TOPIC}")
