"""
License domain services.

LicenseSigner turns a payload into a SignedLicense; LicenseValidator
checks a SignedLicense against a public key and a point in time. Both
work on the bytes produced by CanonicalSerializer.

Validation proves authentic issuance and temporal validity only. Status
kept outside the payload (suspension, revocation) is the caller's to
check against the returned payload.
"""
import base64
import binascii
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from core import metrics
from core.domain.exceptions import (
    InvalidKeyFormatError,
    InvalidPayloadError,
    LicenseIOError,
    MalformedInputError,
    SigningFailedError,
)
from core.domain.timestamps import format_timestamp, utc_now
from core.domain.value_objects import (
    SignatureAlgorithm,
    ValidationErrorKind,
    parse_signature_algorithm,
)
from keys.domain.services import load_private_key, load_public_key, public_key_fingerprint
from licenses.domain.canonical import CanonicalSerializer
from licenses.domain.payload import LicensePayload
from licenses.domain.signed_license import SignedLicense
from licenses.domain.validation import ValidationOptions, ValidationResult

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)
_LATEST = datetime.max.replace(tzinfo=timezone.utc)


def _shift(moment: datetime, delta: timedelta) -> datetime:
    """Add a duration to a UTC datetime, saturating at the calendar limits."""
    try:
        return moment + delta
    except OverflowError:
        return _LATEST if delta > timedelta(0) else _EARLIEST


def signature_padding(algorithm: SignatureAlgorithm) -> padding.AsymmetricPadding:
    """
    Return the RSA padding for a signature algorithm.

    Raises:
        MalformedInputError: If the algorithm is not supported
    """
    if algorithm is SignatureAlgorithm.PS256:
        return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.DIGEST_LENGTH)
    if algorithm is SignatureAlgorithm.RS256:
        return padding.PKCS1v15()
    raise MalformedInputError(f"Unsupported signature algorithm: {algorithm!r}")


class LicenseSigner:
    """Domain service for signing license payloads."""

    def __init__(
        self,
        algorithm: SignatureAlgorithm = SignatureAlgorithm.PS256,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the signer.

        Args:
            algorithm: Default signature algorithm
            clock: Source of the signed_at timestamp
        """
        self.algorithm = algorithm
        self._clock = clock

    def sign(
        self,
        payload: LicensePayload,
        private_key_pem: str,
        password: Optional[str] = None,
        algorithm: Optional[SignatureAlgorithm] = None,
    ) -> SignedLicense:
        """
        Sign a license payload.

        Args:
            payload: Payload to sign
            private_key_pem: Issuer private key (plain or encrypted PEM)
            password: Password when the private key is encrypted
            algorithm: Overrides the signer's default algorithm

        Returns:
            SignedLicense over the canonical encoding of the payload

        Raises:
            InvalidPayloadError: If the payload is structurally invalid
            InvalidKeyFormatError: If the private key cannot be parsed
            DecryptionFailedError: If an encrypted key cannot be decrypted
            SigningFailedError: If the cryptographic operation fails
        """
        if not isinstance(payload, LicensePayload):
            raise InvalidPayloadError("Payload must be a LicensePayload")
        errors = payload.validation_errors()
        if errors:
            raise InvalidPayloadError("Invalid license payload: " + "; ".join(errors))
        try:
            canonical = CanonicalSerializer.canonicalize(payload)
        except MalformedInputError as e:
            raise InvalidPayloadError(e.message) from e

        algorithm = algorithm or self.algorithm
        private_key = load_private_key(private_key_pem, password)
        public_key = private_key.public_key()
        scheme = signature_padding(algorithm)
        try:
            signature = private_key.sign(canonical, scheme, hashes.SHA256())
            # Never hand out a signature that does not verify over these bytes.
            public_key.verify(signature, canonical, scheme, hashes.SHA256())
        except (InvalidSignature, UnsupportedAlgorithm, ValueError, TypeError) as e:
            logger.error("Signing failed for license %s", payload.license_id, exc_info=True)
            raise SigningFailedError(f"Signing failed for license {payload.license_id}") from e

        signed = SignedLicense(
            payload=payload,
            signature_algorithm=algorithm.value,
            signature=base64.b64encode(signature).decode("ascii"),
            signed_at=self._clock(),
            key_fingerprint=public_key_fingerprint(public_key),
        )

        metrics.licenses_signed_total.labels(algorithm=algorithm.value).inc()
        logger.info(
            "Signed license %s for %s (product %s, key %s)",
            payload.license_id,
            payload.licensed_to,
            payload.product_id,
            signed.key_fingerprint,
        )
        return signed


class LicenseValidator:
    """Domain service for license validation."""

    def validate(
        self,
        signed: SignedLicense,
        public_key_pem: str,
        options: Optional[ValidationOptions] = None,
    ) -> ValidationResult:
        """
        Validate a signed license.

        Args:
            signed: Signed license
            public_key_pem: Issuer public key
            options: Clock skew, reference time, grace period

        Returns:
            ValidationResult; routine failures are reported, not raised
        """
        return self._record(self._check(signed, public_key_pem, options or ValidationOptions()))

    def validate_json(
        self,
        license_json: str,
        public_key_pem: str,
        options: Optional[ValidationOptions] = None,
    ) -> ValidationResult:
        """
        Validate a license given as a JSON document.

        Deserialization failures are reported as MALFORMED_INPUT.
        """
        return self._record(self._check_json(license_json, public_key_pem, options or ValidationOptions()))

    def validate_from_file(
        self,
        license_path: PathLike,
        public_key_path: PathLike,
        options: Optional[ValidationOptions] = None,
    ) -> ValidationResult:
        """
        Validate a JSON license file against a PEM public key file.

        Files are read once, without retries. A missing or unreadable file
        is reported as IO_ERROR, undecodable content as MALFORMED_INPUT.
        """
        options = options or ValidationOptions()
        try:
            license_json = _read_text(license_path)
            public_key_pem = _read_text(public_key_path)
        except LicenseIOError as e:
            return self._record(ValidationResult.failure(ValidationErrorKind.IO_ERROR, e.message))
        except MalformedInputError as e:
            return self._record(ValidationResult.failure(ValidationErrorKind.MALFORMED_INPUT, e.message))
        return self._record(self._check_json(license_json, public_key_pem, options))

    def _check_json(
        self, license_json: str, public_key_pem: str, options: ValidationOptions
    ) -> ValidationResult:
        try:
            signed = SignedLicense.from_json(license_json)
        except MalformedInputError as e:
            return ValidationResult.failure(ValidationErrorKind.MALFORMED_INPUT, e.message)
        return self._check(signed, public_key_pem, options)

    def _check(
        self, signed: SignedLicense, public_key_pem: str, options: ValidationOptions
    ) -> ValidationResult:
        checked_at = utc_now()

        try:
            public_key = load_public_key(public_key_pem)
        except InvalidKeyFormatError as e:
            return ValidationResult.failure(ValidationErrorKind.INVALID_KEY_FORMAT, e.message, checked_at)

        if not isinstance(signed, SignedLicense):
            return ValidationResult.failure(
                ValidationErrorKind.MALFORMED_INPUT, "Expected a SignedLicense", checked_at
            )

        try:
            canonical = CanonicalSerializer.canonicalize(signed.payload)
        except MalformedInputError as e:
            return ValidationResult.failure(ValidationErrorKind.MALFORMED_INPUT, e.message, checked_at)

        # Tampering and a wrong key are indistinguishable here and reported alike.
        try:
            algorithm = parse_signature_algorithm(signed.signature_algorithm)
            public_key.verify(
                signed.signature_bytes, canonical, signature_padding(algorithm), hashes.SHA256()
            )
        except (InvalidSignature, MalformedInputError, binascii.Error, ValueError, TypeError):
            return ValidationResult.failure(
                ValidationErrorKind.SIGNATURE_MISMATCH, "License signature does not match", checked_at
            )

        payload = signed.payload
        reference = options.resolve_reference_time()
        skew = options.allowed_clock_skew
        details = {
            "license_id": payload.license_id,
            "reference_time": format_timestamp(reference),
            "key_fingerprint_match": str(
                signed.key_fingerprint == public_key_fingerprint(public_key)
            ).lower(),
        }

        if reference < _shift(payload.valid_from, -skew):
            return ValidationResult.failure(
                ValidationErrorKind.NOT_YET_VALID,
                f"License is not valid before {format_timestamp(payload.valid_from)}",
                checked_at,
                payload=payload,
                details=details,
            )

        if reference > _shift(payload.valid_to, skew):
            grace_expiry = _shift(payload.valid_to, options.grace_period)
            if options.grace_period and reference <= _shift(grace_expiry, skew):
                details["grace_period"] = "true"
                details["grace_period_expires_at"] = format_timestamp(grace_expiry)
                return ValidationResult.success(payload, checked_at, details)
            return ValidationResult.failure(
                ValidationErrorKind.EXPIRED,
                f"License expired on {format_timestamp(payload.valid_to)}",
                checked_at,
                payload=payload,
                details=details,
            )

        remaining = payload.valid_to - reference
        details["days_until_expiry"] = str(max(0, remaining.days))
        if remaining <= options.expiry_warning_window:
            details["expires_soon"] = "true"
        return ValidationResult.success(payload, checked_at, details)

    @staticmethod
    def _record(result: ValidationResult) -> ValidationResult:
        if result.is_valid:
            outcome = "grace_period" if result.details.get("grace_period") else "valid"
            logger.info("License %s validated (%s)", result.details.get("license_id"), outcome)
        else:
            outcome = result.error_kind.value.lower()
            logger.warning(
                "License validation failed: %s (%s)", result.error_kind.value, result.message
            )
        metrics.license_validations_total.labels(outcome=outcome).inc()
        return result


def _read_text(path: PathLike) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"File is not UTF-8 text: {path}") from e
    except OSError as e:
        raise LicenseIOError(f"Unable to read file: {path}") from e
