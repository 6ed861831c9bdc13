"""
Django management command to validate a license file.

Prints the validation result as JSON and exits non-zero when the
license is not valid.
"""

import json
from dataclasses import replace
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from core.conf import default_validation_options
from core.domain.exceptions import DomainException
from core.management.utils import parse_datetime_argument
from licenses.domain.services import LicenseValidator


class Command(BaseCommand):
    """Command to validate a signed license against a public key."""

    help = "Validate a signed license file"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("license", help="License JSON file")
        parser.add_argument("public_key", help="Issuer public key PEM file")
        parser.add_argument(
            "--reference-time",
            default=None,
            help="Validate at this date or ISO-8601 datetime instead of now",
        )
        parser.add_argument(
            "--clock-skew",
            type=int,
            default=None,
            help="Allowed clock skew in seconds (default: LICENSING.ALLOWED_CLOCK_SKEW_SECONDS)",
        )
        parser.add_argument(
            "--grace-days",
            type=int,
            default=None,
            help="Grace period after expiry in days (default: LICENSING.GRACE_PERIOD_DAYS)",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        overrides = {}
        if options["reference_time"]:
            overrides["reference_time"] = parse_datetime_argument(options["reference_time"])
        if options["clock_skew"] is not None:
            overrides["allowed_clock_skew"] = timedelta(seconds=options["clock_skew"])
        if options["grace_days"] is not None:
            overrides["grace_period"] = timedelta(days=options["grace_days"])

        try:
            validation_options = replace(default_validation_options(), **overrides)
        except DomainException as e:
            raise CommandError(e.message) from e

        result = LicenseValidator().validate_from_file(
            options["license"], options["public_key"], validation_options
        )
        self.stdout.write(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

        if not result.is_valid:
            raise CommandError(f"License is not valid: {result.error_kind.value}")

        # pylint: disable=no-member
        if result.details.get("grace_period"):
            self.stdout.write(self.style.WARNING("License has expired and is in its grace period"))
        elif result.details.get("expires_soon"):
            self.stdout.write(
                self.style.WARNING(f"License expires in {result.details['days_until_expiry']} days")
            )
        self.stdout.write(self.style.SUCCESS(f"License {result.payload.license_id} is valid"))
