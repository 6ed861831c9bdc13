"""
License DTOs for command-line and API responses.
"""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class IssuedLicenseDTO:
    """DTO for an issued license."""

    license_id: str
    licensed_to: str
    product_id: str
    key_fingerprint: str
    signature_algorithm: str
    signed_at: datetime
    payload_digest: str
    license_json: str
