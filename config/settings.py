"""
Feather – Django Settings (Infrastructure Only)
===============================================
Django serves as the framework container for the storefront script engine.
The engine itself (core/, engines/) does not depend on Django; only the
script store and the HTTP adapter do.

Environment:
    FEATHER_DB_PATH                 SQLite file (default: <root>/db.sqlite3)
    FEATHER_DEBUG                   "1"/"true" enables DEBUG
    FEATHER_LOG_LEVEL               level for the "feather" logger tree
    LOGIC_SCRIPT_CACHE_TTL_SECONDS  per-tenant script cache TTL (default 300)
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = project root
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "FEATHER_SECRET_KEY",
    "feather-dev-key-replace-before-deployment",
)

DEBUG = _env_flag("FEATHER_DEBUG", default=True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("FEATHER_ALLOWED_HOSTS", "").split(",")
    if host.strip()
]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Feather Modules ───────────────────────────────────
    "core.script_store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("FEATHER_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Logic scripts use UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Script Engine ─────────────────────────────────────────────
LOGIC_SCRIPT_CACHE_TTL_SECONDS = int(
    os.environ.get("LOGIC_SCRIPT_CACHE_TTL_SECONDS", "300")
)

# ── Logging ───────────────────────────────────────────────────
FEATHER_LOG_LEVEL = os.environ.get("FEATHER_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "feather": {
            "handlers": ["console"],
            "level": FEATHER_LOG_LEVEL,
            "propagate": True,
        },
    },
}
