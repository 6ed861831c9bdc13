"""
Production settings for LicensingEngine.
"""

import os

from .base import *  # noqa: F403, F401
from .logging import get_logging_config

DEBUG = False

# Secret key must come from the environment in production
SECRET_KEY = os.environ["SECRET_KEY"]

if LICENSING["DEFAULT_KEY_SIZE_BITS"] < 4096:  # noqa: F405
    LICENSING["DEFAULT_KEY_SIZE_BITS"] = 4096  # noqa: F405

# Logging in production
LOGGING = get_logging_config(
    "production",
    log_file=os.environ.get("LICENSING_LOG_FILE", "/var/log/licensing-engine/app.log"),
)
