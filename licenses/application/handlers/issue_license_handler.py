"""
IssueLicenseHandler.

Handles the issue license command.
"""

import logging
from typing import Optional

from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.dto.license_dto import IssuedLicenseDTO
from licenses.domain.canonical import CanonicalSerializer
from licenses.domain.payload import LicensePayload
from licenses.domain.services import LicenseSigner

logger = logging.getLogger(__name__)


class IssueLicenseHandler:
    """Handler for IssueLicenseCommand."""

    def __init__(self, signer: Optional[LicenseSigner] = None):
        """Initialize handler with a signer."""
        self.signer = signer or LicenseSigner()

    def handle(self, command: IssueLicenseCommand) -> IssuedLicenseDTO:
        """
        Handle issue license command.

        Args:
            command: IssueLicenseCommand

        Returns:
            IssuedLicenseDTO with the license document

        Raises:
            InvalidPayloadError: If the license fields are invalid
            InvalidKeyFormatError: If the private key cannot be parsed
            DecryptionFailedError: If the key password is wrong
            SigningFailedError: If signing fails
        """
        optional = {}
        if command.license_id:
            optional["license_id"] = command.license_id

        payload = LicensePayload(
            issuer=command.issuer,
            licensed_to=command.licensed_to,
            product_id=command.product_id,
            valid_from=command.valid_from,
            valid_to=command.valid_to,
            tier=command.tier,
            features=tuple(command.features),
            metadata=command.metadata,
            consumer_id=command.consumer_id,
            contact_person=command.contact_person,
            contact_email=command.contact_email,
            max_api_calls_per_month=command.max_api_calls_per_month,
            max_concurrent_connections=command.max_concurrent_connections,
            **optional,
        )

        signed = self.signer.sign(
            payload,
            command.private_key_pem,
            password=command.private_key_password,
            algorithm=command.algorithm,
        )

        logger.info("Issued license %s to %s", payload.license_id, payload.licensed_to)

        return IssuedLicenseDTO(
            license_id=payload.license_id,
            licensed_to=payload.licensed_to,
            product_id=payload.product_id,
            key_fingerprint=signed.key_fingerprint,
            signature_algorithm=signed.signature_algorithm,
            signed_at=signed.signed_at,
            payload_digest=CanonicalSerializer.digest(payload),
            license_json=signed.to_json(),
        )
