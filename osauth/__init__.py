"""
OSAuth Python Package

Short-lived authorization tokens for services: issue, serialize, reconstruct
and validate.
"""

__version__ = "0.1.0"

from .errors import (
    OSAuthError,
    ConfigurationError,
    TokenStoreError,
    DuplicateServiceTokenError,
    SignatureError,
)
from .token import (
    AuthToken,
    TokenMode,
    FOREVER,
    format_expiration,
    parse_expiration,
    random_string,
    create_auth_token,
    NoopSigner,
    HMACSigner,
    Ed25519Signer,
)
from .validation import (
    ComparisonPolicy,
    ValidationPolicy,
    ValidationResult,
    TokenValidator,
)
from .config import AuthConfig, configure_logging
from .tokenstore import (
    ServiceTokenStore,
    MemoryServiceTokenStore,
    RedisServiceTokenStore,
    create_token_store,
)
from .module import AuthModule

__all__ = [
    "AuthToken",
    "TokenMode",
    "FOREVER",
    "format_expiration",
    "parse_expiration",
    "random_string",
    "create_auth_token",
    "NoopSigner",
    "HMACSigner",
    "Ed25519Signer",
    "ComparisonPolicy",
    "ValidationPolicy",
    "ValidationResult",
    "TokenValidator",
    "AuthConfig",
    "configure_logging",
    "ServiceTokenStore",
    "MemoryServiceTokenStore",
    "RedisServiceTokenStore",
    "create_token_store",
    "AuthModule",
    "OSAuthError",
    "ConfigurationError",
    "TokenStoreError",
    "DuplicateServiceTokenError",
    "SignatureError",
]
