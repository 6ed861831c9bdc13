"""
Django management command to generate a license signing key pair.

Existing key files are never replaced unless --force is given.
"""

import logging
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.conf import licensing_setting
from core.domain.exceptions import DomainException
from core.management.utils import add_password_arguments, resolve_password, write_text_file
from keys.domain.services import KeyPairManager

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to generate an RSA key pair for license signing."""

    help = "Generate an RSA key pair for license signing"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--output-dir",
            required=True,
            help="Directory to write the key files to",
        )
        parser.add_argument(
            "--name",
            default="license_signing",
            help="File name prefix (default: license_signing)",
        )
        parser.add_argument(
            "--key-size",
            type=int,
            default=None,
            help="Key size in bits (default: LICENSING.DEFAULT_KEY_SIZE_BITS)",
        )
        add_password_arguments(parser, "Encrypt the private key with this password")
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite existing key files",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        key_size = options["key_size"] or int(licensing_setting("DEFAULT_KEY_SIZE_BITS"))
        password = resolve_password(options)
        output_dir = Path(options["output_dir"])
        private_path = output_dir / f"{options['name']}_private.pem"
        public_path = output_dir / f"{options['name']}_public.pem"

        if not options["force"]:
            for path in (private_path, public_path):
                if path.exists():
                    raise CommandError(f"{path} already exists; use --force to overwrite it")

        manager = KeyPairManager(kdf_iterations=int(licensing_setting("KDF_ITERATIONS")))
        try:
            key_pair = manager.generate_key_pair(key_size)
            private_pem = key_pair.private_key_pem
            if password:
                private_pem = manager.encrypt_private_key(private_pem, password)
        except DomainException as e:
            raise CommandError(f"{e.code}: {e.message}") from e

        write_text_file(str(private_path), private_pem, force=options["force"], private=True)
        write_text_file(str(public_path), key_pair.public_key_pem, force=options["force"])
        logger.info("Wrote key pair %s to %s", key_pair.fingerprint, output_dir)

        if key_size < 4096:
            # pylint: disable=no-member
            self.stdout.write(
                self.style.WARNING(f"{key_size}-bit key generated; 4096 bits is recommended for production")
            )
        self.stdout.write(f"Private key: {private_path}{' (encrypted)' if password else ''}")
        self.stdout.write(f"Public key:  {public_path}")
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(f"Fingerprint: {key_pair.fingerprint}"))
