"""
Error types for OSAuth.

Decoding a presented token never raises; these exceptions cover misuse of the
token store, bad configuration and signing failures.
"""

from typing import Any, Dict, Optional


class OSAuthError(Exception):
    """Base exception for OSAuth."""

    def __init__(self, message: str, code: str = "OSAUTH_ERROR", details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(OSAuthError):
    """Raised when configuration values cannot be interpreted."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class TokenStoreError(OSAuthError):
    """Base class for token store failures."""

    def __init__(self, message: str = "Token store error", code: str = "TOKEN_STORE_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, details)


class DuplicateServiceTokenError(TokenStoreError):
    """Raised when a token is issued for a service that already holds one."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(
            f"Duplicate service name: {service_name}",
            "DUPLICATE_SERVICE_TOKEN",
            {"service": service_name},
        )


class SignatureError(OSAuthError):
    """Raised when a token cannot be signed."""

    def __init__(self, message: str = "Token signing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SIGNATURE_ERROR", details)


__all__ = [
    "OSAuthError",
    "ConfigurationError",
    "TokenStoreError",
    "DuplicateServiceTokenError",
    "SignatureError",
]
