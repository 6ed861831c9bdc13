"""
Product key value object and generator.

Product keys are human-readable activation codes in the format
XXXX-XXXX-XXXX-XXXX. They are independent of signed RSA licenses and
carry no identity of their own.
"""
import secrets
from dataclasses import dataclass
from typing import Optional, Set

from core import metrics
from core.domain.exceptions import InvalidArgumentError

# A-Z without I and O, 1-9 without 0
ALLOWED_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ123456789"
GROUP_SIZE = 4
GROUP_COUNT = 4
SEPARATOR = "-"
KEY_LENGTH = GROUP_SIZE * GROUP_COUNT + (GROUP_COUNT - 1)

_ALLOWED = frozenset(ALLOWED_CHARS)


def generate_product_key() -> str:
    """
    Generate a product key in format: XXXX-XXXX-XXXX-XXXX.

    Returns:
        Generated product key string
    """
    groups = [
        "".join(secrets.choice(ALLOWED_CHARS) for _ in range(GROUP_SIZE))
        for _ in range(GROUP_COUNT)
    ]
    return SEPARATOR.join(groups)


def validate_product_key_format(product_key: str) -> bool:
    """
    Check the format of a product key.

    Args:
        product_key: Product key to check (already normalized)

    Returns:
        True if the key is four hyphen-separated groups of four allowed
        characters
    """
    if not isinstance(product_key, str) or len(product_key) != KEY_LENGTH:
        return False
    groups = product_key.split(SEPARATOR)
    if len(groups) != GROUP_COUNT:
        return False
    return all(
        len(group) == GROUP_SIZE and all(char in _ALLOWED for char in group)
        for group in groups
    )


def normalize_product_key(product_key: str) -> str:
    """Remove spaces and tabs and upper-case a user-entered product key."""
    if not isinstance(product_key, str) or not product_key.strip():
        return ""
    return product_key.replace(" ", "").replace("\t", "").upper()


def try_normalize_product_key(product_key: str) -> Optional[str]:
    """Return the normalized key if it is well-formed, otherwise None."""
    normalized = normalize_product_key(product_key)
    if not validate_product_key_format(normalized):
        return None
    return normalized


@dataclass(frozen=True)
class ProductKey:
    """Product key value object."""

    value: str

    def __post_init__(self):
        """Validate product key format."""
        if not validate_product_key_format(self.value):
            raise InvalidArgumentError(f"Invalid product key format: {self.value!r}")

    @classmethod
    def parse(cls, raw: str) -> "ProductKey":
        """
        Normalize and validate user input.

        Raises:
            InvalidArgumentError: If the normalized key is malformed
        """
        return cls(normalize_product_key(raw))

    @property
    def groups(self):
        """Return the four character groups."""
        return tuple(self.value.split(SEPARATOR))

    def __str__(self) -> str:
        """Return key as string."""
        return self.value


class ProductKeyGenerator:
    """Domain service for product key generation."""

    @staticmethod
    def generate() -> str:
        """Generate a single product key."""
        key = generate_product_key()
        metrics.product_keys_generated_total.inc()
        return key

    @staticmethod
    def validate_format(product_key: str) -> bool:
        """Check the format of a product key."""
        return validate_product_key_format(product_key)

    @staticmethod
    def normalize(product_key: str) -> str:
        """Normalize a user-entered product key."""
        return normalize_product_key(product_key)

    @staticmethod
    def try_normalize(product_key: str) -> Optional[str]:
        """Normalize and check a key; None if it is malformed."""
        return try_normalize_product_key(product_key)

    @staticmethod
    def generate_many(count: int) -> Set[str]:
        """
        Generate distinct product keys.

        Args:
            count: Number of keys wanted

        Returns:
            Set of exactly ``count`` unique keys

        Raises:
            InvalidArgumentError: If count is not a positive integer
        """
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidArgumentError("Count must be greater than zero")
        keys: Set[str] = set()
        while len(keys) < count:
            keys.add(generate_product_key())
        metrics.product_keys_generated_total.inc(count)
        return keys
