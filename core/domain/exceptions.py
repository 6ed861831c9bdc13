"""
Domain exceptions.

Domain exceptions represent failures of the licensing engine. Signing,
key management and product key generation raise them; validation
reports the same conditions as a ValidationResult instead.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicensingException(DomainException):
    """Base exception for license issuance and validation errors."""

    pass


class InvalidPayloadError(LicensingException):
    """Raised when a license payload is structurally invalid."""

    def __init__(self, message: str = "Invalid license payload"):
        super().__init__(message, code="INVALID_PAYLOAD")


class InvalidKeyFormatError(LicensingException):
    """Raised when PEM key material cannot be parsed as a supported key."""

    def __init__(self, message: str = "Invalid key format"):
        super().__init__(message, code="INVALID_KEY_FORMAT")


class SigningFailedError(LicensingException):
    """Raised when the cryptographic library fails to sign a payload."""

    def __init__(self, message: str = "License signing failed"):
        super().__init__(message, code="SIGNING_FAILED")


class SignatureMismatchError(LicensingException):
    """Raised when a signature does not verify (tampered data or wrong key)."""

    def __init__(self, message: str = "License signature does not match"):
        super().__init__(message, code="SIGNATURE_MISMATCH")


class LicenseNotYetValidError(LicensingException):
    """Raised when a license validity window has not started yet."""

    def __init__(self, message: str = "License is not yet valid"):
        super().__init__(message, code="NOT_YET_VALID")


class LicenseExpiredError(LicensingException):
    """Raised when a license has expired."""

    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="EXPIRED")


class DecryptionFailedError(LicensingException):
    """
    Raised when an encrypted private key cannot be decrypted.

    Wrong password, tampered ciphertext and malformed envelopes all
    produce the same message.
    """

    def __init__(self, message: str = "Unable to decrypt private key"):
        super().__init__(message, code="DECRYPTION_FAILED")


class MalformedInputError(LicensingException):
    """Raised when a serialized license or field value cannot be decoded."""

    def __init__(self, message: str = "Malformed input"):
        super().__init__(message, code="MALFORMED_INPUT")


class LicenseIOError(LicensingException):
    """Raised when a license or key file cannot be read."""

    def __init__(self, message: str = "Unable to read file"):
        super().__init__(message, code="IO_ERROR")


class InvalidArgumentError(LicensingException):
    """Raised when an operation receives an out-of-range argument."""

    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message, code="INVALID_ARGUMENT")
