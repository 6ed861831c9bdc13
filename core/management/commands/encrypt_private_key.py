"""
Django management command to password-protect a private key file.
"""

from django.core.management.base import BaseCommand, CommandError

from core.conf import licensing_setting
from core.domain.exceptions import DomainException
from core.management.utils import (
    add_password_arguments,
    read_text_file,
    resolve_password,
    write_text_file,
)
from keys.domain.services import KeyPairManager


class Command(BaseCommand):
    """Command to encrypt a private key PEM for storage."""

    help = "Encrypt a private key PEM file with a password"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("input", help="Unencrypted private key PEM file")
        parser.add_argument("output", help="Destination for the encrypted key")
        add_password_arguments(parser, "Password to encrypt the key with")
        parser.add_argument(
            "--iterations",
            type=int,
            default=None,
            help="PBKDF2 iterations (default: LICENSING.KDF_ITERATIONS)",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite the output file if it exists",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        password = resolve_password(options)
        if not password:
            raise CommandError("A password is required (--password or --password-env)")

        manager = KeyPairManager(kdf_iterations=int(licensing_setting("KDF_ITERATIONS")))
        try:
            encrypted = manager.encrypt_private_key(
                read_text_file(options["input"]), password, iterations=options["iterations"]
            )
        except DomainException as e:
            raise CommandError(f"{e.code}: {e.message}") from e

        write_text_file(options["output"], encrypted, force=options["force"], private=True)
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(f"Encrypted private key written to {options['output']}"))
