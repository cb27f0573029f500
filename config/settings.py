"""
ARL – Django Settings (Infrastructure Only)
============================================
Django serves as the HTTP container for the registry adapter.
The registry engine is the authority — Django does not dictate structure.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("ARL_SECRET_KEY", "arl-dev-key-replace-before-deployment")

DEBUG = os.environ.get("ARL_DEBUG", "true").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
# The registry keeps its state in the ledger, not in Django models.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# Unused by the registry; Django requires one to be declared.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Registry ──────────────────────────────────────────────────
# ADMINISTRATOR is fixed for the lifetime of the registry instance.
ARL_REGISTRY = {
    "ADMINISTRATOR": os.environ.get(
        "ARL_ADMINISTRATOR",
        "0x00000000000000000000000000000000000000ad",
    ),
    "STRICT_SELLER_AUTHORIZATION": os.environ.get(
        "ARL_STRICT_SELLER_AUTHORIZATION", "true"
    ),
    "REPAIR_STALE_DOMAIN_INDEX": os.environ.get(
        "ARL_REPAIR_STALE_DOMAIN_INDEX", "true"
    ),
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "arl": {
            "handlers": ["console"],
            "level": os.environ.get("ARL_LOG_LEVEL", "INFO"),
        },
    },
}
