"""
Password hashing and secure random helpers for account authentication.

hash_password uses a single salted SHA-256 pass. That is not a slow KDF;
stored hashes keep the (hash, salt) contract so the algorithm can be
swapped for PBKDF2/Argon2 without changing callers.
"""
import base64
import hashlib
import secrets
from typing import Tuple

SALT_BYTES = 32
TOKEN_BYTES = 32
TEMPORARY_PASSWORD_LENGTH = 12

_UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
_LOWERCASE = "abcdefghijkmnpqrstuvwxyz"
_DIGITS = "23456789"
_SYMBOLS = "!@#$%"
TEMPORARY_PASSWORD_ALPHABET = _UPPERCASE + _LOWERCASE + _DIGITS + _SYMBOLS


def hash_password(password: str) -> Tuple[str, str]:
    """
    Hash a password with a fresh random salt.

    Args:
        password: Plain-text password

    Returns:
        Tuple of (base64 hash, base64 salt)
    """
    salt = base64.b64encode(secrets.token_bytes(SALT_BYTES)).decode("ascii")
    return hash_password_with_salt(password, salt), salt


def hash_password_with_salt(password: str, salt: str) -> str:
    """Return base64(SHA256(password + salt)) where salt is the stored base64 text."""
    digest = hashlib.sha256((password + salt).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    """
    Verify a password against a stored hash and salt.

    Args:
        password: Plain-text password to check
        password_hash: Stored base64 hash
        salt: Stored base64 salt

    Returns:
        True if the password matches, False otherwise
    """
    computed = hash_password_with_salt(password, salt)
    return secrets.compare_digest(computed.encode("ascii"), password_hash.encode("utf-8"))


def generate_secure_token() -> str:
    """Return 32 cryptographically random bytes, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(TOKEN_BYTES)).decode("ascii")


def generate_temporary_password() -> str:
    """
    Generate a 12 character temporary password.

    The password always contains at least one uppercase letter, one
    lowercase letter, one digit and one symbol.
    """
    chars = [
        secrets.choice(_UPPERCASE),
        secrets.choice(_LOWERCASE),
        secrets.choice(_DIGITS),
        secrets.choice(_SYMBOLS),
    ]
    chars.extend(
        secrets.choice(TEMPORARY_PASSWORD_ALPHABET)
        for _ in range(TEMPORARY_PASSWORD_LENGTH - len(chars))
    )
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
