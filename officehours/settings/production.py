"""
Production settings for Office Hours project.

Everything secret comes from the environment.
"""

from decouple import config

from .base import *  # noqa: F401,F403
from .base import DATABASES, REST_FRAMEWORK

DEBUG = False

SECRET_KEY = config("SECRET_KEY")

DATABASES["default"]["OPTIONS"]["sslmode"] = config("POSTGRES_SSL_MODE", default="require")

SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=True, cast=bool)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = config("SECURE_HSTS_SECONDS", default=31536000, cast=int)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = ("rest_framework.renderers.JSONRenderer",)
