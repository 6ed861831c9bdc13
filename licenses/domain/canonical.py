"""
Canonical payload encoding.

Signer and validator both sign/verify exactly the bytes produced here.
The encoding is compact JSON with sorted object keys, features ordered
by lower-cased name, UTF-8 text and millisecond UTC timestamps, so equal
payloads encode to equal bytes on every platform and in every process.
"""
import hashlib
import json

from core.domain.exceptions import MalformedInputError
from licenses.domain.payload import LicensePayload


class CanonicalSerializer:
    """Deterministic byte encoding of a LicensePayload."""

    @staticmethod
    def canonicalize(payload: LicensePayload) -> bytes:
        """
        Encode a payload canonically.

        Args:
            payload: License payload

        Returns:
            Canonical UTF-8 bytes

        Raises:
            MalformedInputError: If the payload holds values JSON cannot encode
        """
        try:
            document = payload.to_dict()
            document["features"] = sorted(
                document["features"], key=lambda feature: (feature["name"].lower(), feature["name"])
            )
            text = json.dumps(
                document,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
            # Lone surrogates survive json.loads but are not encodable as UTF-8
            return text.encode("utf-8")
        except (AttributeError, TypeError, ValueError) as e:
            raise MalformedInputError("License payload cannot be canonically encoded") from e

    @staticmethod
    def digest(payload: LicensePayload) -> str:
        """Return the SHA-256 hex digest of the canonical encoding."""
        return hashlib.sha256(CanonicalSerializer.canonicalize(payload)).hexdigest()


def canonicalize(payload: LicensePayload) -> bytes:
    """Module-level shortcut for CanonicalSerializer.canonicalize."""
    return CanonicalSerializer.canonicalize(payload)


def payload_digest(payload: LicensePayload) -> str:
    """Module-level shortcut for CanonicalSerializer.digest."""
    return CanonicalSerializer.digest(payload)
