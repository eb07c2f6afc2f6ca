"""Django settings for the venue reservations API.

Every deployment-specific value comes from the environment; the defaults
give a working SQLite + local-memory setup for development and tests.
"""

import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def get_env(var_name: str, default=None, required: bool = False):
    value = os.environ.get(var_name, default)
    if required and value in (None, ""):
        raise ImproperlyConfigured(f"Missing required environment variable: {var_name}")
    return value


SECRET_KEY = get_env("DJANGO_SECRET_KEY", "insecure-development-key")
DEBUG = get_env("DJANGO_DEBUG", "False").lower() == "true"
ALLOWED_HOSTS = [
    host.strip() for host in get_env("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "reservations.apps.ReservationsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Database: SQLite unless DB_ENGINE points elsewhere (e.g. PostgreSQL)
DB_ENGINE = get_env("DB_ENGINE", "django.db.backends.sqlite3")
CONN_TIMEOUT = int(get_env("CONN_TIMEOUT", "5"))

if DB_ENGINE == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": get_env("DB_NAME", str(BASE_DIR / "db.sqlite3")),
            "OPTIONS": {"timeout": CONN_TIMEOUT},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": get_env("DB_NAME", required=True),
            "USER": get_env("DB_USER", required=True),
            "PASSWORD": get_env("DB_PASSWORD", required=True),
            "HOST": get_env("DB_HOST", "localhost"),
            "PORT": get_env("DB_PORT", "5432"),
            "CONN_MAX_AGE": int(get_env("DB_CONN_MAX_AGE", "60")),
            "OPTIONS": {"connect_timeout": CONN_TIMEOUT},
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = get_env("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# Cache: django-redis when CACHE_URL is set, local memory otherwise
CACHE_URL = get_env("CACHE_URL", "")

if CACHE_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": CACHE_URL,
            "KEY_PREFIX": "reservations",
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "SOCKET_CONNECT_TIMEOUT": float(get_env("CACHE_CONNECT_TIMEOUT", "2")),
                "SOCKET_TIMEOUT": float(get_env("CACHE_TIMEOUT", "2")),
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "reservations-cache",
        }
    }

REST_FRAMEWORK = {
    "EXCEPTION_HANDLER": "reservations.handlers.exceptions.domain_exception_handler",
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
}

RESERVATIONS = {
    "BASE_HALL_RATE": get_env("BASE_HALL_RATE", "5000"),
    "TAX_PERCENTAGE": get_env("TAX_PERCENTAGE", "18"),
    "DEPOSIT_PERCENTAGE": get_env("DEPOSIT_PERCENTAGE", "20"),
    "QUOTATION_VALIDITY_DAYS": get_env("QUOTATION_VALIDITY_DAYS", "7"),
    "CACHE_TTL": get_env("CACHE_TTL", "1800"),
    "RETRY_ATTEMPTS": get_env("RETRY_ATTEMPTS", "3"),
    "RETRY_DELAY": get_env("RETRY_DELAY", "0.2"),
}

LOG_LEVEL = get_env("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "reservations": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": False,
        },
    },
}
