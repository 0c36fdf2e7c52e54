import os

from config.base import (  # noqa: F401
    FREQUENT_ABSENCE_DAYS,
    FREQUENT_ABSENCE_THRESHOLD,
    SESSION_DAYS,
    db_config_from_env,
    logging_config,
)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True

LOGGING = logging_config(os.getenv("LOG_LEVEL", "DEBUG"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
