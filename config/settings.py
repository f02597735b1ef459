"""
Custody Ledger – Django Settings (Infrastructure Only)
=========================================================
Django serves as the container for the durable feed journal.
The custody engines do not depend on Django; only
core.event_store's DjangoFeedJournal does.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("CUSTODY_SECRET_KEY", "custody-dev-key-replace-before-deployment")

DEBUG = os.environ.get("CUSTODY_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "core.event_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("CUSTODY_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Custody Ledger ────────────────────────────────────────────
# Read by CustodyConfig.from_settings().
CUSTODY_ADMIN_ID = os.environ.get("CUSTODY_ADMIN_ID", "custody-admin")
CUSTODY_ADMIN_NAME = os.environ.get("CUSTODY_ADMIN_NAME", "Administrator")
CUSTODY_ADMIN_LOCATION = os.environ.get("CUSTODY_ADMIN_LOCATION", "")
CUSTODY_REGISTER_ADMIN_AS_OVERSEER = (
    os.environ.get("CUSTODY_REGISTER_ADMIN_AS_OVERSEER", "1") == "1"
)

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
        "custody": {
            "handlers": ["console"],
            "level": os.environ.get("CUSTODY_LOG_LEVEL", "INFO"),
        },
    },
}
