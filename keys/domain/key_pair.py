"""
Key material value objects.

KeyPair holds PEM-encoded RSA key material for one signing identity.
EncryptedPrivateKey is the parsed form of a password-protected private
key envelope: a PEM block whose headers carry everything needed to
derive the wrapping key again.
"""
import base64
import binascii
from dataclasses import dataclass
from typing import Dict, List

from core.domain.exceptions import MalformedInputError

ENVELOPE_LABEL = "LICENSING ENCRYPTED PRIVATE KEY"
ENVELOPE_BEGIN = f"-----BEGIN {ENVELOPE_LABEL}-----"
ENVELOPE_END = f"-----END {ENVELOPE_LABEL}-----"

_HEADER_NAMES = ("Kdf", "Iterations", "Salt", "Cipher", "Nonce")
_LINE_WIDTH = 64


@dataclass(frozen=True)
class KeyPair:
    """
    RSA key pair for a signing identity.

    The private key belongs to the issuer only and is never embedded in
    a signed license.
    """

    private_key_pem: str
    public_key_pem: str
    key_size_bits: int

    @property
    def fingerprint(self) -> str:
        """Return the fingerprint of the public key."""
        from keys.domain.services import key_fingerprint

        return key_fingerprint(self.public_key_pem)

    def __repr__(self) -> str:
        """Keep private key material out of reprs and tracebacks."""
        return f"KeyPair(key_size_bits={self.key_size_bits}, fingerprint={self.fingerprint!r})"


@dataclass(frozen=True)
class EncryptedPrivateKey:
    """
    Password-wrapped private key envelope.

    The header block (KDF name, iteration count, salt, cipher, nonce) is
    authenticated together with the ciphertext, so changing any header
    makes decryption fail.
    """

    kdf: str
    iterations: int
    salt: bytes
    cipher: str
    nonce: bytes
    ciphertext: bytes

    def header_lines(self) -> List[str]:
        """Return the PEM header lines in their fixed order."""
        return [
            f"Kdf: {self.kdf}",
            f"Iterations: {self.iterations}",
            f"Salt: {base64.b64encode(self.salt).decode('ascii')}",
            f"Cipher: {self.cipher}",
            f"Nonce: {base64.b64encode(self.nonce).decode('ascii')}",
        ]

    def associated_data(self) -> bytes:
        """Return the bytes bound to the ciphertext as associated data."""
        return "\n".join(self.header_lines()).encode("ascii")

    def to_pem(self) -> str:
        """Encode the envelope as a PEM block with headers."""
        body = base64.b64encode(self.ciphertext).decode("ascii")
        body_lines = [body[i:i + _LINE_WIDTH] for i in range(0, len(body), _LINE_WIDTH)]
        return "\n".join([ENVELOPE_BEGIN, *self.header_lines(), "", *body_lines, ENVELOPE_END]) + "\n"

    @classmethod
    def from_pem(cls, text: str) -> "EncryptedPrivateKey":
        """
        Parse an envelope produced by to_pem.

        Args:
            text: PEM text

        Returns:
            EncryptedPrivateKey instance

        Raises:
            MalformedInputError: If the text is not a well-formed envelope
        """
        if not isinstance(text, str):
            raise MalformedInputError("Encrypted private key must be text")
        lines = [line.strip() for line in text.strip().splitlines()]
        if len(lines) < 4 or lines[0] != ENVELOPE_BEGIN or lines[-1] != ENVELOPE_END:
            raise MalformedInputError("Not an encrypted private key envelope")

        inner = lines[1:-1]
        if "" not in inner:
            raise MalformedInputError("Envelope headers are not terminated")
        separator = inner.index("")
        headers = _parse_headers(inner[:separator])

        try:
            iterations = int(headers["Iterations"])
            salt = base64.b64decode(headers["Salt"], validate=True)
            nonce = base64.b64decode(headers["Nonce"], validate=True)
            ciphertext = base64.b64decode("".join(inner[separator + 1:]), validate=True)
        except (ValueError, binascii.Error) as e:
            raise MalformedInputError("Envelope contains invalid values") from e

        if iterations <= 0 or not salt or not nonce or not ciphertext:
            raise MalformedInputError("Envelope contains invalid values")

        return cls(
            kdf=headers["Kdf"],
            iterations=iterations,
            salt=salt,
            cipher=headers["Cipher"],
            nonce=nonce,
            ciphertext=ciphertext,
        )


def _parse_headers(lines: List[str]) -> Dict[str, str]:
    headers = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or name.strip() in headers:
            raise MalformedInputError("Invalid envelope header")
        headers[name.strip()] = value.strip()
    if set(headers) != set(_HEADER_NAMES):
        raise MalformedInputError("Envelope headers are incomplete")
    return headers


def is_envelope(text: str) -> bool:
    """Return True if the text looks like an encrypted key envelope."""
    return isinstance(text, str) and ENVELOPE_BEGIN in text
