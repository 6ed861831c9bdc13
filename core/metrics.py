"""
Prometheus metrics for the licensing engine.

Counters only; the engine keeps no other shared state.
"""

from prometheus_client import Counter

# Signing metrics
licenses_signed_total = Counter(
    "licenses_signed_total",
    "Total licenses signed",
    ["algorithm"],
)

# Validation metrics
license_validations_total = Counter(
    "license_validations_total",
    "Total license validations by outcome",
    ["outcome"],
)

# Key management metrics
key_pairs_generated_total = Counter(
    "key_pairs_generated_total",
    "Total RSA key pairs generated",
    ["key_size"],
)

private_key_decryption_failures_total = Counter(
    "private_key_decryption_failures_total",
    "Total failed private key decryptions",
)

# Product key metrics
product_keys_generated_total = Counter(
    "product_keys_generated_total",
    "Total product keys generated",
)
