"""
Keys module - RSA signing key management.

This module handles:
- RSA key pair generation and PEM encoding
- Private and public key parsing and validation
- Password-based private key encryption for storage
- Public key fingerprints
"""
