"""
LicensePayload domain value object.

The payload is the signable content of a license. It is immutable: any
business status that changes after issuance (suspension, revocation)
lives outside the payload and is never signed.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.domain.exceptions import MalformedInputError
from core.domain.timestamps import (
    format_timestamp,
    normalize_timestamp,
    parse_timestamp,
    utc_now,
)
from core.domain.value_objects import (
    FeatureCategory,
    LicenseTier,
    parse_feature_category,
    parse_tier,
)

PAYLOAD_FORMAT_VERSION = "1.0"
SUPPORTED_FORMAT_VERSIONS = frozenset({PAYLOAD_FORMAT_VERSION})


@dataclass(frozen=True)
class LicenseFeature:
    """A named feature granted by a license."""

    name: str
    enabled: bool = True
    category: FeatureCategory = FeatureCategory.CORE
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation."""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "category": self.category.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "LicenseFeature":
        """
        Build a feature from its JSON representation.

        Raises:
            MalformedInputError: If required fields are missing or ill-typed
        """
        if not isinstance(data, dict):
            raise MalformedInputError("Feature must be an object")
        name = data.get("name")
        enabled = data.get("enabled", True)
        description = data.get("description")
        if not isinstance(name, str):
            raise MalformedInputError("Feature name must be a string")
        if not isinstance(enabled, bool):
            raise MalformedInputError(f"Feature {name!r} has a non-boolean 'enabled'")
        if description is not None and not isinstance(description, str):
            raise MalformedInputError(f"Feature {name!r} has a non-string description")
        return cls(
            name=name,
            enabled=enabled,
            category=parse_feature_category(data.get("category", FeatureCategory.CORE.value)),
            description=description,
        )


@dataclass(frozen=True)
class LicensePayload:
    """
    Signable license content.

    Timestamps are normalized to UTC with millisecond precision, features
    are stored as a tuple and metadata as a read-only mapping.
    """

    issuer: str
    licensed_to: str
    product_id: str
    valid_from: datetime
    valid_to: datetime
    tier: LicenseTier = LicenseTier.COMMUNITY
    features: Tuple[LicenseFeature, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    license_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    consumer_id: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    max_api_calls_per_month: Optional[int] = None
    max_concurrent_connections: Optional[int] = None
    format_version: str = PAYLOAD_FORMAT_VERSION

    def __post_init__(self):
        """Normalize timestamps and freeze collections."""
        if not isinstance(self.valid_from, datetime) or not isinstance(self.valid_to, datetime):
            raise TypeError("valid_from and valid_to must be datetime instances")
        object.__setattr__(self, "valid_from", normalize_timestamp(self.valid_from))
        object.__setattr__(self, "valid_to", normalize_timestamp(self.valid_to))
        object.__setattr__(self, "features", tuple(self.features))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def validation_errors(self) -> List[str]:
        """
        Check structural invariants.

        Returns:
            List of error messages; empty when the payload can be signed
        """
        errors = []
        for field_name in ("license_id", "issuer", "licensed_to", "product_id"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{field_name} is required")

        if self.valid_from > self.valid_to:
            errors.append("valid_from must not be after valid_to")

        if not isinstance(self.tier, LicenseTier):
            errors.append("tier must be a LicenseTier")

        seen = set()
        for feature in self.features:
            if not isinstance(feature, LicenseFeature):
                errors.append("features must contain LicenseFeature items")
                continue
            if not isinstance(feature.name, str) or not feature.name.strip():
                errors.append("feature name is required")
                continue
            if feature.name.lower() in seen:
                errors.append(f"duplicate feature {feature.name!r}")
            seen.add(feature.name.lower())

        for key, value in self.metadata.items():
            if not isinstance(key, str) or not isinstance(value, str):
                errors.append("metadata keys and values must be strings")
                break

        for limit_name in ("max_api_calls_per_month", "max_concurrent_connections"):
            limit = getattr(self, limit_name)
            if limit is not None and (
                isinstance(limit, bool) or not isinstance(limit, int) or limit < 0
            ):
                errors.append(f"{limit_name} must be a non-negative integer")

        if self.format_version not in SUPPORTED_FORMAT_VERSIONS:
            errors.append(f"unsupported format version {self.format_version!r}")

        if not self._text_is_utf8():
            errors.append("text fields must be encodable as UTF-8")

        return errors

    def _text_is_utf8(self) -> bool:
        values = [
            self.license_id,
            self.issuer,
            self.licensed_to,
            self.product_id,
            self.consumer_id,
            self.contact_person,
            self.contact_email,
            *self.metadata.keys(),
            *self.metadata.values(),
        ]
        for feature in self.features:
            if isinstance(feature, LicenseFeature):
                values.extend((feature.name, feature.description))
        try:
            for value in values:
                if isinstance(value, str):
                    value.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True

    def is_structurally_valid(self) -> bool:
        """Return True if validation_errors() is empty."""
        return not self.validation_errors()

    def has_feature(self, name: str) -> bool:
        """Return True if an enabled feature with this name (any case) is included."""
        feature = self.get_feature(name)
        return feature is not None and feature.enabled

    def get_feature(self, name: str) -> Optional[LicenseFeature]:
        """Return the feature with this name (any case), or None."""
        wanted = name.lower()
        for feature in self.features:
            if feature.name.lower() == wanted:
                return feature
        return None

    def days_until_expiry(self, current_time: Optional[datetime] = None) -> int:
        """Return whole days left until valid_to, never negative."""
        check_time = normalize_timestamp(current_time) if current_time else utc_now()
        return max(0, (self.valid_to - check_time).days)

    def expires_within(self, days: int, current_time: Optional[datetime] = None) -> bool:
        """Return True if valid_to falls within the next ``days`` days."""
        check_time = normalize_timestamp(current_time) if current_time else utc_now()
        return self.valid_to - check_time <= timedelta(days=days)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation with stable camelCase field names."""
        return {
            "licenseId": self.license_id,
            "issuer": self.issuer,
            "licensedTo": self.licensed_to,
            "productId": self.product_id,
            "consumerId": self.consumer_id,
            "contactPerson": self.contact_person,
            "contactEmail": self.contact_email,
            "tier": self.tier.value,
            "features": [feature.to_dict() for feature in self.features],
            "metadata": dict(self.metadata),
            "validFrom": format_timestamp(self.valid_from),
            "validTo": format_timestamp(self.valid_to),
            "maxApiCallsPerMonth": self.max_api_calls_per_month,
            "maxConcurrentConnections": self.max_concurrent_connections,
            "formatVersion": self.format_version,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "LicensePayload":
        """
        Build a payload from its JSON representation.

        Args:
            data: Decoded JSON object

        Returns:
            LicensePayload instance

        Raises:
            MalformedInputError: On missing or ill-typed fields, or an
                unsupported format version
        """
        if not isinstance(data, dict):
            raise MalformedInputError("License payload must be an object")

        format_version = data.get("formatVersion")
        if format_version not in SUPPORTED_FORMAT_VERSIONS:
            raise MalformedInputError(f"Unsupported payload format version: {format_version!r}")

        features = data.get("features", [])
        metadata = data.get("metadata", {})
        if not isinstance(features, list):
            raise MalformedInputError("features must be a list")
        if not isinstance(metadata, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in metadata.items()
        ):
            raise MalformedInputError("metadata must map strings to strings")

        payload = cls(
            license_id=_required_str(data, "licenseId"),
            issuer=_required_str(data, "issuer"),
            licensed_to=_required_str(data, "licensedTo"),
            product_id=_required_str(data, "productId"),
            consumer_id=_optional_str(data, "consumerId"),
            contact_person=_optional_str(data, "contactPerson"),
            contact_email=_optional_str(data, "contactEmail"),
            tier=parse_tier(data.get("tier")),
            features=tuple(LicenseFeature.from_dict(item) for item in features),
            metadata=metadata,
            valid_from=parse_timestamp(data.get("validFrom")),
            valid_to=parse_timestamp(data.get("validTo")),
            max_api_calls_per_month=_optional_int(data, "maxApiCallsPerMonth"),
            max_concurrent_connections=_optional_int(data, "maxConcurrentConnections"),
            format_version=format_version,
        )
        if not payload._text_is_utf8():
            raise MalformedInputError("License payload contains text that is not valid UTF-8")
        return payload


def _required_str(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise MalformedInputError(f"{name} must be a string")
    return value


def _optional_str(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise MalformedInputError(f"{name} must be a string or null")
    return value


def _optional_int(data: Dict[str, Any], name: str) -> Optional[int]:
    value = data.get(name)
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise MalformedInputError(f"{name} must be an integer or null")
    return value
