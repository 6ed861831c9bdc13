"""
App configuration for the Licensing Engine.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LicensingEngineConfig(AppConfig):
    """App configuration for LicensingEngine."""

    name = "LicensingEngine"
    verbose_name = "Licensing Engine"

    def ready(self):
        """Check licensing settings when Django starts."""
        from core.conf import licensing_setting
        from keys.domain.services import MIN_KDF_ITERATIONS, MIN_KEY_SIZE_BITS

        if int(licensing_setting("DEFAULT_KEY_SIZE_BITS")) < MIN_KEY_SIZE_BITS:
            logger.warning(
                "LICENSING.DEFAULT_KEY_SIZE_BITS is below %d; key generation will be rejected",
                MIN_KEY_SIZE_BITS,
            )
        if int(licensing_setting("KDF_ITERATIONS")) < MIN_KDF_ITERATIONS:
            logger.warning(
                "LICENSING.KDF_ITERATIONS is below %d; key encryption will be rejected",
                MIN_KDF_ITERATIONS,
            )
