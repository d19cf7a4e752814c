"""
Development settings for NEUQueue project.

These settings override the base settings for local development environments.
"""

from .base import *

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", "django-insecure-development-key-not-for-production")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG", "True") == "True"

ALLOWED_HOSTS = ["*"]

# Local Postgres by default; USE_SQLITE=true switches to a file database
if env("USE_SQLITE", "False").lower() != "true":
    DATABASES["default"]["HOST"] = env("POSTGRES_HOST", "localhost")
    DATABASES["default"]["OPTIONS"]["sslmode"] = env("POSTGRES_SSL_MODE", "disable")

# No Redis needed for local work
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "neuqueue-dev",
    }
}

# Run tasks inline unless a broker is configured
CELERY_TASK_ALWAYS_EAGER = env("CELERY_TASK_ALWAYS_EAGER", "True") == "True"

CORS_ALLOW_ALL_ORIGINS = True

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

LOGGING["loggers"]["apps"]["level"] = "DEBUG"
