"""Runtime configuration defaults for persistence, pricing and the operator console."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("STOREFRONT_DB_PATH", "data/storefront.db")
LOG_DIR = os.environ.get("STOREFRONT_LOG_DIR", "data/logs")
BACKUP_DIR = os.environ.get("STOREFRONT_BACKUP_DIR", "data/backups")

STORE_NAME = "SARASWATHI TIFFINS"
# Orders are not accepted at or after this local hour.
CUTOFF_HOUR = 18
INITIAL_PIN = "2009"

PLATFORM_FEE = 5
GST_PERCENT = 5

RETENTION_DAYS = 60
POLL_INTERVAL_SECONDS = 30.0
NOTIFICATION_SECONDS = 3.5
