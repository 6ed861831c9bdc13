"""
Licensing engine settings.

Values come from the ``LICENSING`` dict in Django settings, falling back
to the defaults below. Domain services never read settings themselves;
management commands resolve values here and pass them in.
"""
from datetime import timedelta
from typing import Any

from django.conf import settings

DEFAULTS = {
    "ISSUER": "LicensingEngine",
    "DEFAULT_KEY_SIZE_BITS": 4096,
    "SIGNATURE_ALGORITHM": "PS256",
    "KDF_ITERATIONS": 600_000,
    "ALLOWED_CLOCK_SKEW_SECONDS": 0,
    "GRACE_PERIOD_DAYS": 0,
    "EXPIRY_WARNING_DAYS": 7,
}


def licensing_setting(name: str) -> Any:
    """
    Return a licensing setting.

    Args:
        name: Setting name, e.g. ``KDF_ITERATIONS``

    Raises:
        KeyError: If the name is not a known licensing setting
    """
    if name not in DEFAULTS:
        raise KeyError(name)
    configured = getattr(settings, "LICENSING", {}) or {}
    return configured.get(name, DEFAULTS[name])


def default_validation_options():
    """Build ValidationOptions from settings."""
    from licenses.domain.validation import ValidationOptions

    return ValidationOptions(
        allowed_clock_skew=timedelta(seconds=int(licensing_setting("ALLOWED_CLOCK_SKEW_SECONDS"))),
        grace_period=timedelta(days=int(licensing_setting("GRACE_PERIOD_DAYS"))),
        expiry_warning_window=timedelta(days=int(licensing_setting("EXPIRY_WARNING_DAYS"))),
    )
