"""
IssueLicenseCommand.

Command to build and sign a license for a customer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from core.domain.value_objects import LicenseTier, SignatureAlgorithm
from licenses.domain.payload import LicenseFeature


@dataclass
class IssueLicenseCommand:
    """
    Command to issue a signed license.

    The private key is used for this one signing call only.
    """

    issuer: str
    licensed_to: str
    product_id: str
    valid_from: datetime
    valid_to: datetime
    private_key_pem: str
    private_key_password: Optional[str] = None
    tier: LicenseTier = LicenseTier.COMMUNITY
    features: List[LicenseFeature] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)
    license_id: Optional[str] = None  # Generated if not provided
    consumer_id: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    max_api_calls_per_month: Optional[int] = None
    max_concurrent_connections: Optional[int] = None
    algorithm: SignatureAlgorithm = SignatureAlgorithm.PS256

    def __repr__(self) -> str:
        """Keep key material and password out of reprs."""
        return (
            f"IssueLicenseCommand(licensed_to={self.licensed_to!r}, "
            f"product_id={self.product_id!r}, tier={self.tier.value!r})"
        )
