"""
Base Django settings for LicensingEngine.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# The engine signs with RSA keys, not with SECRET_KEY; Django still requires one.
SECRET_KEY = os.environ.get("SECRET_KEY", "django-insecure-licensing-engine-development-only")

DEBUG = False

ALLOWED_HOSTS = []

# Application definition
INSTALLED_APPS = [
    "LicensingEngine.apps.LicensingEngineConfig",
    "core",
    "keys",
    "licenses",
    "product_keys",
]

# The engine is stateless and needs no database
DATABASES = {}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Licensing engine
LICENSING = {
    "ISSUER": os.environ.get("LICENSING_ISSUER", "LicensingEngine"),
    "DEFAULT_KEY_SIZE_BITS": int(os.environ.get("LICENSING_KEY_SIZE_BITS", "4096")),
    "SIGNATURE_ALGORITHM": os.environ.get("LICENSING_SIGNATURE_ALGORITHM", "PS256"),
    "KDF_ITERATIONS": int(os.environ.get("LICENSING_KDF_ITERATIONS", "600000")),
    "ALLOWED_CLOCK_SKEW_SECONDS": int(os.environ.get("LICENSING_CLOCK_SKEW_SECONDS", "0")),
    "GRACE_PERIOD_DAYS": int(os.environ.get("LICENSING_GRACE_PERIOD_DAYS", "0")),
    "EXPIRY_WARNING_DAYS": int(os.environ.get("LICENSING_EXPIRY_WARNING_DAYS", "7")),
}

# Observability
LOGGING = get_logging_config(os.environ.get("LICENSING_ENVIRONMENT", "production"))
