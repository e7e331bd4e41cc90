"""
Django settings for relaycast project.

Every value can be overridden through environment variables so the same
settings module works for local development and deployments.
"""

import os
from pathlib import Path


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


def env_int(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    return int(value)


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-relaycast-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [
    host.strip() for host in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if host.strip()
]


# Application definition

INSTALLED_APPS = [
    'sources',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'relaycast.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'relaycast.wsgi.application'

# Nothing is persisted; feeds are rebuilt from the providers on demand.
DATABASES = {}

# The TTL cache for provider responses lives in process memory.
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'relaycast',
        'TIMEOUT': env_int('RELAYCAST_CACHE_TTL', 24 * 60 * 60),
        'OPTIONS': {
            'MAX_ENTRIES': env_int('RELAYCAST_CACHE_MAX_ENTRIES', 2000),
        },
    }
}

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = False

USE_TZ = True


# Logging

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'sources': {
            'handlers': ['console'],
            'level': os.environ.get('RELAYCAST_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}


# relaycast settings

# Public URL the service is hosted at (or proxied from); used for enclosure links.
# When empty, links are built from the incoming request's host.
RELAYCAST_URL = os.environ.get('RELAYCAST_URL', '')

# How long provider responses and resolved download URLs are cached (seconds)
RELAYCAST_CACHE_TTL = env_int('RELAYCAST_CACHE_TTL', 24 * 60 * 60)

RELAYCAST_CACHE_ALIAS = 'default'

# Timeout for requests to provider APIs (seconds)
RELAYCAST_HTTP_TIMEOUT = env_int('RELAYCAST_HTTP_TIMEOUT', 30)

# Number of items in a YouTube feed when no limit is requested
RELAYCAST_YOUTUBE_DEFAULT_LIMIT = env_int('RELAYCAST_YOUTUBE_DEFAULT_LIMIT', 50)

# Proxy for yt-dlp (needed on cloud VMs where YouTube blocks requests)
RELAYCAST_YTDLP_PROXY = os.environ.get('RELAYCAST_YTDLP_PROXY', '')

# Extra yt-dlp arguments, e.g. '--socket-timeout 20 --cookies /etc/relaycast/cookies.txt'
RELAYCAST_YTDLP_ARGS = os.environ.get('RELAYCAST_YTDLP_ARGS', '')
