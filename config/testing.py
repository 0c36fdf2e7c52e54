import os

from config.base import (  # noqa: F401
    FREQUENT_ABSENCE_DAYS,
    FREQUENT_ABSENCE_THRESHOLD,
    SESSION_DAYS,
    db_config_from_env,
    logging_config,
)

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env()

DEBUG = False
TESTING = True

LOGGING = logging_config("WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
