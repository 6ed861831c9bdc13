"""
Validation options and results.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from core.domain.exceptions import InvalidArgumentError
from core.domain.timestamps import format_timestamp, normalize_timestamp, utc_now
from core.domain.value_objects import ValidationErrorKind
from licenses.domain.payload import LicensePayload


@dataclass(frozen=True)
class ValidationOptions:
    """
    Settings for a single validation call.

    Attributes:
        allowed_clock_skew: Tolerance applied to both ends of the window
        reference_time: Time to validate at (None means now)
        grace_period: Extra time after valid_to during which an expired
            license is still accepted and flagged as in grace
        expiry_warning_window: Valid licenses expiring within this window
            are flagged with ``expires_soon``
    """

    allowed_clock_skew: timedelta = timedelta(0)
    reference_time: Optional[datetime] = None
    grace_period: timedelta = timedelta(0)
    expiry_warning_window: timedelta = timedelta(days=7)

    def __post_init__(self):
        """Reject negative durations and non-datetime reference times."""
        for name in ("allowed_clock_skew", "grace_period", "expiry_warning_window"):
            value = getattr(self, name)
            if not isinstance(value, timedelta) or value < timedelta(0):
                raise InvalidArgumentError(f"{name} must be a non-negative timedelta")
        if self.reference_time is not None:
            if not isinstance(self.reference_time, datetime):
                raise InvalidArgumentError("reference_time must be a datetime")
            object.__setattr__(self, "reference_time", normalize_timestamp(self.reference_time))

    def resolve_reference_time(self) -> datetime:
        """Return the reference time, defaulting to now."""
        return self.reference_time or utc_now()


@dataclass
class ValidationResult:
    """
    Outcome of validating one signed license.

    payload is only set once the signature has been verified.
    """

    is_valid: bool
    error_kind: Optional[ValidationErrorKind]
    payload: Optional[LicensePayload]
    checked_at: datetime
    details: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(
        cls, payload: LicensePayload, checked_at: datetime, details: Optional[Dict[str, str]] = None
    ) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(
            is_valid=True,
            error_kind=None,
            payload=payload,
            checked_at=checked_at,
            details=dict(details or {}),
        )

    @classmethod
    def failure(
        cls,
        error_kind: ValidationErrorKind,
        message: str,
        checked_at: Optional[datetime] = None,
        payload: Optional[LicensePayload] = None,
        details: Optional[Dict[str, str]] = None,
    ) -> "ValidationResult":
        """Create a failed validation result."""
        merged = dict(details or {})
        merged["message"] = message
        return cls(
            is_valid=False,
            error_kind=error_kind,
            payload=payload,
            checked_at=checked_at or utc_now(),
            details=merged,
        )

    @property
    def message(self) -> Optional[str]:
        """Return the human-readable failure message, if any."""
        return self.details.get("message")

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "isValid": self.is_valid,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "payload": self.payload.to_dict() if self.payload else None,
            "checkedAt": format_timestamp(self.checked_at),
            "details": dict(self.details),
        }
