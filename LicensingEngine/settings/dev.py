"""
Development settings for LicensingEngine.
"""

from .base import *  # noqa: F403, F401
from .logging import get_logging_config

DEBUG = True

# Faster key generation on developer machines; production keeps 4096
LICENSING["DEFAULT_KEY_SIZE_BITS"] = 2048  # noqa: F405

LOGGING = get_logging_config("development")
