"""
Development settings for Office Hours project.

These settings override the base settings for local development environments.
"""

from decouple import config

from .base import *  # noqa: F401,F403
from .base import LOGGING

SECRET_KEY = config("SECRET_KEY", default="django-insecure-development-key-not-for-production")

DEBUG = config("DEBUG", default=True, cast=bool)

ALLOWED_HOSTS = ["*"]

# Celery: always run tasks immediately in dev
CELERY_TASK_ALWAYS_EAGER = True

# Dev cache: local memory
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Logging: verbose in dev
LOGGING["handlers"]["console"]["level"] = "DEBUG"
for name in ("apps", "algorithms", "core"):
    LOGGING["loggers"][name]["level"] = "DEBUG"
LOGGING["loggers"]["django.db.backends"] = {
    "handlers": ["console"],
    "level": "INFO",
    "propagate": False,
}
