"""
Password-based private key wrapping.

PBKDF2-HMAC-SHA256 turns the password into an AES-256 key and AES-GCM
encrypts the private key PEM text. The envelope headers are passed as GCM
associated data.
"""
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.domain.exceptions import MalformedInputError
from keys.domain.key_pair import EncryptedPrivateKey

KDF_NAME = "PBKDF2-HMAC-SHA256"
CIPHER_NAME = "AES-256-GCM"
SALT_BYTES = 16
NONCE_BYTES = 12
KEY_BYTES = 32
# Upper bound on a header-supplied work factor
MAX_KDF_ITERATIONS = 10_000_000


def derive_wrapping_key(password: str, salt: bytes, iterations: int) -> bytes:
    """Derive the AES key for an envelope from a password."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def seal(plaintext: bytes, password: str, iterations: int) -> EncryptedPrivateKey:
    """
    Encrypt key bytes under a password.

    Args:
        plaintext: Private key PEM text as UTF-8 bytes
        password: Wrapping password
        iterations: PBKDF2 iteration count

    Returns:
        EncryptedPrivateKey envelope
    """
    header = EncryptedPrivateKey(
        kdf=KDF_NAME,
        iterations=iterations,
        salt=secrets.token_bytes(SALT_BYTES),
        cipher=CIPHER_NAME,
        nonce=secrets.token_bytes(NONCE_BYTES),
        ciphertext=b"",
    )
    key = derive_wrapping_key(password, header.salt, iterations)
    ciphertext = AESGCM(key).encrypt(header.nonce, plaintext, header.associated_data())
    return EncryptedPrivateKey(
        kdf=header.kdf,
        iterations=header.iterations,
        salt=header.salt,
        cipher=header.cipher,
        nonce=header.nonce,
        ciphertext=ciphertext,
    )


def open_envelope(envelope: EncryptedPrivateKey, password: str) -> bytes:
    """
    Decrypt an envelope.

    Raises:
        MalformedInputError: If the envelope names an unsupported scheme
        cryptography.exceptions.InvalidTag: On wrong password or tampering
    """
    if envelope.kdf != KDF_NAME or envelope.cipher != CIPHER_NAME:
        raise MalformedInputError("Unsupported envelope scheme")
    if envelope.iterations > MAX_KDF_ITERATIONS or len(envelope.nonce) != NONCE_BYTES:
        raise MalformedInputError("Envelope parameters out of range")
    key = derive_wrapping_key(password, envelope.salt, envelope.iterations)
    return AESGCM(key).decrypt(envelope.nonce, envelope.ciphertext, envelope.associated_data())
