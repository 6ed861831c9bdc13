"""
Django management command to issue a signed license.

Usage:
    python manage.py issue_license --private-key keys/license_signing_private.pem \
        --licensed-to "Acme Corp" --product analytics \
        --valid-from 2024-01-01 --valid-to 2024-12-31 \
        --feature reporting --feature sso:security --metadata seats=25
"""

from django.core.management.base import BaseCommand, CommandError

from core.conf import licensing_setting
from core.domain.exceptions import DomainException
from core.domain.value_objects import (
    FeatureCategory,
    parse_feature_category,
    parse_signature_algorithm,
    parse_tier,
)
from core.management.utils import (
    add_password_arguments,
    parse_datetime_argument,
    read_text_file,
    resolve_password,
    write_text_file,
)
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.domain.payload import LicenseFeature


def parse_feature_argument(value: str) -> LicenseFeature:
    """Parse ``name`` or ``name:category`` into a LicenseFeature."""
    name, _, category = value.partition(":")
    if not name.strip():
        raise CommandError(f"Invalid feature: {value!r}")
    try:
        parsed_category = parse_feature_category(category.strip()) if category else FeatureCategory.CORE
    except DomainException as e:
        raise CommandError(e.message) from e
    return LicenseFeature(name=name.strip(), category=parsed_category)


def parse_metadata_argument(values) -> dict:
    """Parse repeated ``KEY=VALUE`` arguments."""
    metadata = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise CommandError(f"Invalid metadata entry {item!r}; expected KEY=VALUE")
        metadata[key.strip()] = value
    return metadata


class Command(BaseCommand):
    """Command to sign a license payload with the issuer private key."""

    help = "Issue a signed license"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("--private-key", required=True, help="Issuer private key PEM file")
        add_password_arguments(parser, "Password for an encrypted private key")
        parser.add_argument("--licensed-to", required=True, help="Licensee name")
        parser.add_argument("--product", required=True, help="Product identifier")
        parser.add_argument("--valid-from", required=True, help="Start date or ISO-8601 datetime (UTC)")
        parser.add_argument("--valid-to", required=True, help="End date or ISO-8601 datetime (UTC)")
        parser.add_argument("--tier", default="community", help="License tier (default: community)")
        parser.add_argument(
            "--feature",
            action="append",
            default=[],
            help="Granted feature as NAME or NAME:CATEGORY (repeatable)",
        )
        parser.add_argument(
            "--metadata",
            action="append",
            default=[],
            help="Metadata entry as KEY=VALUE (repeatable)",
        )
        parser.add_argument("--issuer", default=None, help="Issuer (default: LICENSING.ISSUER)")
        parser.add_argument("--license-id", default=None, help="License id (default: random UUID)")
        parser.add_argument("--consumer-id", default=None)
        parser.add_argument("--contact-person", default=None)
        parser.add_argument("--contact-email", default=None)
        parser.add_argument("--max-api-calls", type=int, default=None, help="Monthly API call limit")
        parser.add_argument("--max-connections", type=int, default=None, help="Concurrent connection limit")
        parser.add_argument(
            "--algorithm",
            default=None,
            help="PS256 or RS256 (default: LICENSING.SIGNATURE_ALGORITHM)",
        )
        parser.add_argument("--output", default=None, help="Write the license here instead of stdout")
        parser.add_argument("--force", action="store_true", help="Overwrite the output file")

    def handle(self, *args, **options):
        """Execute the command."""
        try:
            tier = parse_tier(options["tier"])
            algorithm = parse_signature_algorithm(
                options["algorithm"] or licensing_setting("SIGNATURE_ALGORITHM")
            )
        except DomainException as e:
            raise CommandError(e.message) from e

        command = IssueLicenseCommand(
            issuer=options["issuer"] or licensing_setting("ISSUER"),
            licensed_to=options["licensed_to"],
            product_id=options["product"],
            valid_from=parse_datetime_argument(options["valid_from"]),
            valid_to=parse_datetime_argument(options["valid_to"]),
            private_key_pem=read_text_file(options["private_key"]),
            private_key_password=resolve_password(options),
            tier=tier,
            features=[parse_feature_argument(value) for value in options["feature"]],
            metadata=parse_metadata_argument(options["metadata"]),
            license_id=options["license_id"],
            consumer_id=options["consumer_id"],
            contact_person=options["contact_person"],
            contact_email=options["contact_email"],
            max_api_calls_per_month=options["max_api_calls"],
            max_concurrent_connections=options["max_connections"],
            algorithm=algorithm,
        )

        try:
            issued = IssueLicenseHandler().handle(command)
        except DomainException as e:
            raise CommandError(f"{e.code}: {e.message}") from e

        if options["output"]:
            write_text_file(options["output"], issued.license_json + "\n", force=options["force"])
            # pylint: disable=no-member
            self.stdout.write(
                self.style.SUCCESS(
                    f"License {issued.license_id} issued to {issued.licensed_to} -> {options['output']}"
                )
            )
        else:
            self.stdout.write(issued.license_json)
