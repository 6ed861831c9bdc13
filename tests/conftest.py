"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone

import pytest

from core.domain.value_objects import FeatureCategory, LicenseTier
from keys.domain.services import KeyPairManager, MIN_KDF_ITERATIONS
from licenses.domain.payload import LicenseFeature, LicensePayload
from licenses.domain.services import LicenseSigner, LicenseValidator


@pytest.fixture(scope="session")
def key_pair_manager():
    """Fixture for KeyPairManager with the cheapest accepted KDF cost."""
    return KeyPairManager(kdf_iterations=MIN_KDF_ITERATIONS)


@pytest.fixture(scope="session")
def key_pair(key_pair_manager):
    """Fixture for a 2048-bit issuer key pair shared across the session."""
    return key_pair_manager.generate_key_pair(2048)


@pytest.fixture(scope="session")
def other_key_pair(key_pair_manager):
    """Fixture for an unrelated key pair."""
    return key_pair_manager.generate_key_pair(2048)


@pytest.fixture
def signer():
    """Fixture for LicenseSigner."""
    return LicenseSigner()


@pytest.fixture
def validator():
    """Fixture for LicenseValidator."""
    return LicenseValidator()


@pytest.fixture
def sample_payload():
    """Fixture for a license valid throughout 2024."""
    return LicensePayload(
        issuer="Test Issuer",
        licensed_to="Acme Corp",
        product_id="analytics-suite",
        valid_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
        valid_to=datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        tier=LicenseTier.PROFESSIONAL,
        features=(
            LicenseFeature(name="Reporting"),
            LicenseFeature(name="sso", category=FeatureCategory.SECURITY),
            LicenseFeature(name="Export", enabled=False),
        ),
        metadata={"seats": "25", "region": "eu"},
        license_id="3f0c6f8e-5d0b-4a57-9d7e-2c1f6a9b8e11",
        contact_email="licensing@acme.example",
        max_api_calls_per_month=100000,
    )


@pytest.fixture
def signed_license(signer, sample_payload, key_pair):
    """Fixture for the sample payload signed with the session key."""
    return signer.sign(sample_payload, key_pair.private_key_pem)


@pytest.fixture
def mid_2024():
    """Fixture for a reference time inside the sample validity window."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
