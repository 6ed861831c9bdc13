"""
Licenses module - signed license issuance and validation.

This module handles:
- LicensePayload and SignedLicense value objects
- Canonical payload encoding
- License signing with RSA private keys
- License validation (signature and validity window)
"""
