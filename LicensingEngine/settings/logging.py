"""
Logging configuration for structured JSON logging.

Key material, passwords and signatures are never passed to loggers;
license ids, products, key fingerprints and outcomes are.
"""

import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "licensing-engine"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds service context."""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record, record, message_dict):
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = SERVICE_NAME
        log_record["environment"] = self.environment


def get_logging_config(environment: str = "development", log_file: str = None) -> dict:
    """
    Get logging configuration for the application.

    Args:
        environment: Environment name (development, production, test)
        log_file: Optional path for a rotating JSON log file

    Returns:
        Django logging configuration dictionary
    """
    log_level = "DEBUG" if environment == "development" else "INFO"
    app_handlers = ["console"]

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": CustomJsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d",
                "environment": environment,
            },
            "simple": {
                "format": "{levelname} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": sys.stderr,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": log_level,
        },
        "loggers": {
            "django": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }
        app_handlers.append("file")

    for app in ("core", "keys", "licenses", "product_keys", "LicensingEngine"):
        config["loggers"][app] = {
            "handlers": list(app_handlers),
            "level": log_level,
            "propagate": False,
        }

    return config
