import os


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "dabestan_db"),
    }


def logging_config(level: str = "INFO") -> dict:
    """dictConfig for the app: one console handler, package loggers at ``level``."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{asctime} {levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "src.dabestan.dabestan": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "werkzeug": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }


SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
FREQUENT_ABSENCE_THRESHOLD = int(os.getenv("FREQUENT_ABSENCE_THRESHOLD", "3"))
FREQUENT_ABSENCE_DAYS = int(os.getenv("FREQUENT_ABSENCE_DAYS", "30"))
