"""
Production settings for NEUQueue project.

These settings override the base settings for production environments.
"""

from .base import *
from .base import env

DEBUG = env("DEBUG", "False").lower() == "true"

SECRET_KEY = env("SECRET_KEY", required=True)

ALLOWED_HOSTS = [h.strip() for h in env("ALLOWED_HOSTS", "", required=True).split(",")]

STATIC_ROOT = env("STATIC_ROOT", str(BASE_DIR / "staticfiles"))

SECURE_HSTS_SECONDS = int(env("SECURE_HSTS_SECONDS", "31536000"))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

# Persist logs next to the app in addition to stdout
LOG_DIR.mkdir(exist_ok=True)
LOGGING["handlers"]["file"] = {
    "level": "INFO",
    "class": "logging.FileHandler",
    "filename": LOG_DIR / "neuqueue.log",
    "formatter": "verbose",
}
for logger_name in ("django", "neuqueue", "apps", "core"):
    LOGGING["loggers"][logger_name]["handlers"] = ["console", "file"]
