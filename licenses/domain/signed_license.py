"""
SignedLicense domain value object.

A signed license is what gets shipped to a customer: the payload, the
signature over its canonical encoding and signing metadata. It never
contains private key material.
"""
import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from core.domain.exceptions import MalformedInputError
from core.domain.timestamps import format_timestamp, normalize_timestamp, parse_timestamp
from core.domain.value_objects import parse_signature_algorithm
from licenses.domain.payload import LicensePayload


@dataclass(frozen=True)
class SignedLicense:
    """Payload plus signature and signing metadata."""

    payload: LicensePayload
    signature_algorithm: str
    signature: str
    signed_at: datetime
    key_fingerprint: str

    def __post_init__(self):
        """Normalize the signing timestamp."""
        object.__setattr__(self, "signed_at", normalize_timestamp(self.signed_at))

    @property
    def signature_bytes(self) -> bytes:
        """
        Decode the base64 signature.

        Raises:
            binascii.Error: If the signature is not valid base64
        """
        return base64.b64decode(self.signature, validate=True)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation with stable field names."""
        return {
            "payload": self.payload.to_dict(),
            "signatureAlgorithm": self.signature_algorithm,
            "signature": self.signature,
            "signedAt": format_timestamp(self.signed_at),
            "keyFingerprint": self.key_fingerprint,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to a JSON license document."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> "SignedLicense":
        """
        Build a signed license from its JSON representation.

        Raises:
            MalformedInputError: If any field is missing or ill-typed
        """
        if not isinstance(data, dict):
            raise MalformedInputError("Signed license must be an object")
        for name in ("payload", "signatureAlgorithm", "signature", "signedAt", "keyFingerprint"):
            if name not in data:
                raise MalformedInputError(f"Signed license is missing {name!r}")

        algorithm = data["signatureAlgorithm"]
        parse_signature_algorithm(algorithm)

        signature = data["signature"]
        if not isinstance(signature, str):
            raise MalformedInputError("signature must be a base64 string")
        try:
            base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedInputError("signature is not valid base64") from e

        key_fingerprint = data["keyFingerprint"]
        if not isinstance(key_fingerprint, str):
            raise MalformedInputError("keyFingerprint must be a string")

        return cls(
            payload=LicensePayload.from_dict(data["payload"]),
            signature_algorithm=algorithm,
            signature=signature,
            signed_at=parse_timestamp(data["signedAt"]),
            key_fingerprint=key_fingerprint,
        )

    @classmethod
    def from_json(cls, text: str) -> "SignedLicense":
        """
        Parse a JSON license document.

        Raises:
            MalformedInputError: If the text is not a valid license document
        """
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedInputError("License document is not UTF-8") from e
        if not isinstance(text, str):
            raise MalformedInputError("License document must be text")
        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedInputError("License document is not valid JSON") from e
        return cls.from_dict(data)
