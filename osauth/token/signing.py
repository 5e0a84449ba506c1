"""Pluggable token signing.

Validation compares a presented token against the server-held copy. A signer
adds a signature property to a structured token at issuance and checks it
when the token comes back, without changing the token's property layout.

``NoopSigner`` is the default and accepts everything.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from typing import Optional, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from ..errors import SignatureError
from .types import AuthToken

logger = logging.getLogger(__name__)

PROP_SIGNATURE = "Sig"
PROP_KEY_ID = "Kid"


def canonical_body(token: AuthToken) -> bytes:
    """Deterministic JSON of the token's non-empty properties, signature excluded."""
    document = {k: v for k, v in token.properties() if v and k != PROP_SIGNATURE}
    return json.dumps(document, separators=(",", ":"), sort_keys=True).encode("utf-8")


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text.encode("ascii"))


class TokenSigner(Protocol):
    """Signing capability plugged into validation."""

    def sign(self, token: AuthToken) -> None:
        ...  # pragma: no cover - interface placeholder

    def verify(self, token: AuthToken) -> bool:
        ...  # pragma: no cover - interface placeholder


class NoopSigner:
    """Signs nothing and verifies everything."""

    def sign(self, token: AuthToken) -> None:
        return None

    def verify(self, token: AuthToken) -> bool:
        return True


class HMACSigner:
    """HMAC-SHA256 over the canonical token body, stored in ``Sig``."""

    def __init__(self, secret_key: str):
        if not secret_key:
            raise SignatureError("HMAC signing requires a non-empty key")
        self._secret = secret_key.encode("utf-8")

    def _digest(self, token: AuthToken) -> bytes:
        return hmac.new(self._secret, canonical_body(token), hashlib.sha256).digest()

    def sign(self, token: AuthToken) -> None:
        if token.is_opaque:
            raise SignatureError("Opaque tokens cannot be signed")
        token.add_property(PROP_SIGNATURE, _b64(self._digest(token)))

    def verify(self, token: AuthToken) -> bool:
        if token.is_opaque:
            return False
        signature = token.get_property(PROP_SIGNATURE)
        if not signature:
            return False
        try:
            presented = _unb64(signature)
        except (binascii.Error, ValueError):
            return False
        return hmac.compare_digest(presented, self._digest(token))


class Ed25519Signer:
    """Ed25519 signatures over the canonical token body.

    A signer built from only a public key can verify but not sign.
    """

    def __init__(
        self,
        private_key: Optional[Ed25519PrivateKey] = None,
        public_key: Optional[Ed25519PublicKey] = None,
    ):
        if private_key is None and public_key is None:
            private_key = Ed25519PrivateKey.generate()
        self._private = private_key
        self._public = public_key or private_key.public_key()
        raw = self._public.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        self.key_id = hashlib.sha256(raw).hexdigest()[:16]

    def verifier(self) -> "Ed25519Signer":
        """A verify-only signer sharing this public key."""
        return Ed25519Signer(public_key=self._public)

    def sign(self, token: AuthToken) -> None:
        if self._private is None:
            raise SignatureError("Ed25519 signer has no private key")
        if token.is_opaque:
            raise SignatureError("Opaque tokens cannot be signed")
        token.add_property(PROP_KEY_ID, self.key_id)
        token.add_property(PROP_SIGNATURE, _b64(self._private.sign(canonical_body(token))))

    def verify(self, token: AuthToken) -> bool:
        if token.is_opaque:
            return False
        signature = token.get_property(PROP_SIGNATURE)
        if not signature or token.get_property(PROP_KEY_ID) != self.key_id:
            return False
        try:
            self._public.verify(_unb64(signature), canonical_body(token))
        except (InvalidSignature, binascii.Error, ValueError):
            logger.debug("[OSAuth] Ed25519 signature rejected")
            return False
        return True


__all__ = [
    "PROP_SIGNATURE",
    "PROP_KEY_ID",
    "canonical_body",
    "TokenSigner",
    "NoopSigner",
    "HMACSigner",
    "Ed25519Signer",
]
