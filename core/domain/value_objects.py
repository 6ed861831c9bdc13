"""
Value objects for the domain.

Enumerations shared by the licensing packages. Every enum is parsed from
its wire string through an explicit lookup table, so an unknown value is
reported as malformed input instead of silently mapped.
"""
from enum import Enum
from typing import Dict, Type

from core.domain.exceptions import (
    DecryptionFailedError,
    DomainException,
    InvalidArgumentError,
    InvalidKeyFormatError,
    InvalidPayloadError,
    LicenseExpiredError,
    LicenseIOError,
    LicenseNotYetValidError,
    MalformedInputError,
    SignatureMismatchError,
    SigningFailedError,
)


class LicenseTier(Enum):
    """License tier value object."""

    COMMUNITY = "community"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"

    def __str__(self) -> str:
        """Return tier as string."""
        return self.value


class FeatureCategory(Enum):
    """Feature category value object."""

    CORE = "core"
    SECURITY = "security"
    MONITORING = "monitoring"
    PERFORMANCE = "performance"
    INTEGRATION = "integration"
    MANAGEMENT = "management"
    DEVELOPER = "developer"
    BUSINESS_INTELLIGENCE = "business_intelligence"
    CUSTOM = "custom"

    def __str__(self) -> str:
        """Return category as string."""
        return self.value


class SignatureAlgorithm(Enum):
    """RSA signature schemes understood by the engine."""

    PS256 = "PS256"  # RSA-PSS, MGF1-SHA256
    RS256 = "RS256"  # RSA PKCS#1 v1.5, SHA256

    def __str__(self) -> str:
        """Return algorithm name."""
        return self.value


class ValidationErrorKind(Enum):
    """Reason a license failed validation."""

    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_KEY_FORMAT = "INVALID_KEY_FORMAT"
    SIGNING_FAILED = "SIGNING_FAILED"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    NOT_YET_VALID = "NOT_YET_VALID"
    EXPIRED = "EXPIRED"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    IO_ERROR = "IO_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    def __str__(self) -> str:
        """Return error kind as string."""
        return self.value


_TIERS: Dict[str, LicenseTier] = {
    "community": LicenseTier.COMMUNITY,
    "professional": LicenseTier.PROFESSIONAL,
    "enterprise": LicenseTier.ENTERPRISE,
    "custom": LicenseTier.CUSTOM,
}

_FEATURE_CATEGORIES: Dict[str, FeatureCategory] = {
    "core": FeatureCategory.CORE,
    "security": FeatureCategory.SECURITY,
    "monitoring": FeatureCategory.MONITORING,
    "performance": FeatureCategory.PERFORMANCE,
    "integration": FeatureCategory.INTEGRATION,
    "management": FeatureCategory.MANAGEMENT,
    "developer": FeatureCategory.DEVELOPER,
    "business_intelligence": FeatureCategory.BUSINESS_INTELLIGENCE,
    "custom": FeatureCategory.CUSTOM,
}

_SIGNATURE_ALGORITHMS: Dict[str, SignatureAlgorithm] = {
    "PS256": SignatureAlgorithm.PS256,
    "RS256": SignatureAlgorithm.RS256,
}

_ERROR_KINDS: Dict[str, ValidationErrorKind] = {
    kind.value: kind for kind in ValidationErrorKind
}

_EXCEPTION_KINDS: Dict[Type[DomainException], ValidationErrorKind] = {
    InvalidPayloadError: ValidationErrorKind.INVALID_PAYLOAD,
    InvalidKeyFormatError: ValidationErrorKind.INVALID_KEY_FORMAT,
    SigningFailedError: ValidationErrorKind.SIGNING_FAILED,
    SignatureMismatchError: ValidationErrorKind.SIGNATURE_MISMATCH,
    LicenseNotYetValidError: ValidationErrorKind.NOT_YET_VALID,
    LicenseExpiredError: ValidationErrorKind.EXPIRED,
    DecryptionFailedError: ValidationErrorKind.DECRYPTION_FAILED,
    MalformedInputError: ValidationErrorKind.MALFORMED_INPUT,
    LicenseIOError: ValidationErrorKind.IO_ERROR,
    InvalidArgumentError: ValidationErrorKind.INVALID_ARGUMENT,
}


def _lookup(table: Dict[str, Enum], value, label: str):
    if not isinstance(value, str) or value not in table:
        raise MalformedInputError(f"Unrecognized {label}: {value!r}")
    return table[value]


def parse_tier(value: str) -> LicenseTier:
    """Parse a license tier from its wire value."""
    return _lookup(_TIERS, value, "license tier")


def parse_feature_category(value: str) -> FeatureCategory:
    """Parse a feature category from its wire value."""
    return _lookup(_FEATURE_CATEGORIES, value, "feature category")


def parse_signature_algorithm(value: str) -> SignatureAlgorithm:
    """Parse a signature algorithm name (e.g. ``PS256``)."""
    return _lookup(_SIGNATURE_ALGORITHMS, value, "signature algorithm")


def parse_error_kind(value: str) -> ValidationErrorKind:
    """Parse a validation error kind from its wire value."""
    return _lookup(_ERROR_KINDS, value, "validation error kind")


def error_kind_for(exc: DomainException) -> ValidationErrorKind:
    """
    Map a domain exception to the validation error kind it represents.

    Args:
        exc: Licensing domain exception

    Returns:
        Matching ValidationErrorKind

    Raises:
        KeyError: If the exception type has no error kind
    """
    for exc_type, kind in _EXCEPTION_KINDS.items():
        if isinstance(exc, exc_type):
            return kind
    raise KeyError(type(exc).__name__)
