"""
Django management command to generate product keys.
"""

from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import DomainException
from product_keys.domain.product_key import ProductKeyGenerator


class Command(BaseCommand):
    """Command to print unique product keys, one per line."""

    help = "Generate XXXX-XXXX-XXXX-XXXX product keys"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--count",
            type=int,
            default=1,
            help="Number of unique keys to generate (default: 1)",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        try:
            keys = ProductKeyGenerator.generate_many(options["count"])
        except DomainException as e:
            raise CommandError(e.message) from e

        for key in sorted(keys):
            self.stdout.write(key)
