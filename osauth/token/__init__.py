"""
Token module initialization
"""

from .expiration import (
    FOREVER,
    DEFAULT_TOKEN_LIFETIME,
    format_expiration,
    parse_expiration,
    is_expired,
    utc_now,
)
from .types import (
    AuthToken,
    TokenMode,
    PROP_SERVICE,
    PROP_SESSION,
    PROP_EXPIRATION,
    PROP_SECRET,
    random_string,
    create_auth_token,
)
from .signing import (
    TokenSigner,
    NoopSigner,
    HMACSigner,
    Ed25519Signer,
    canonical_body,
)

__all__ = [
    # Token type
    "AuthToken",
    "TokenMode",
    "PROP_SERVICE",
    "PROP_SESSION",
    "PROP_EXPIRATION",
    "PROP_SECRET",
    "random_string",
    "create_auth_token",

    # Expiration helpers
    "FOREVER",
    "DEFAULT_TOKEN_LIFETIME",
    "format_expiration",
    "parse_expiration",
    "is_expired",
    "utc_now",

    # Signing
    "TokenSigner",
    "NoopSigner",
    "HMACSigner",
    "Ed25519Signer",
    "canonical_body",
]
