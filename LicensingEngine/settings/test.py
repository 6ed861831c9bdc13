"""
Test settings for LicensingEngine.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

# Smallest accepted values keep the suite fast
LICENSING = {
    **LICENSING,  # noqa: F405
    "ISSUER": "Test Issuer",
    "DEFAULT_KEY_SIZE_BITS": 2048,
    "KDF_ITERATIONS": 100_000,
    "ALLOWED_CLOCK_SKEW_SECONDS": 0,
    "GRACE_PERIOD_DAYS": 0,
}

# Disable logging during tests
LOGGING_CONFIG = None
