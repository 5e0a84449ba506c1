"""
Auth token type and its wire codec.

An ``AuthToken`` is a bag of named string properties plus a derived, cached
wire string. The wire string is built lazily the first time it is read after
a mutation. Two wire representations exist:

- structured: URL-safe Base64 of a compact JSON object holding every non-empty
  property (``Srv``, ``Sid``, ``Exp``, ``Secret`` and any extra keys)
- opaque: an arbitrary string used verbatim, for simple shared-secret tokens

``AuthToken.from_string`` accepts either form without knowing in advance which
one produced it.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import secrets
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union

from .expiration import (
    DEFAULT_TOKEN_LIFETIME,
    expiration_from_now,
    format_expiration,
    is_expired,
    parse_expiration,
)

logger = logging.getLogger(__name__)

PROP_SERVICE = "Srv"
PROP_SESSION = "Sid"
PROP_EXPIRATION = "Exp"
PROP_SECRET = "Secret"

SECRET_LENGTH = 16

_DIGITS = "0123456789"


class TokenMode(Enum):
    """Which representation produces the token's wire string."""
    STRUCTURED = "structured"
    OPAQUE = "opaque"


def random_string(length: int) -> str:
    """Return a string of random decimal digits, length clamped to 1..128."""
    length = max(1, min(128, length))
    return "".join(secrets.choice(_DIGITS) for _ in range(length))


def _property_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError("token properties must be flat")
    return json.dumps(value)


def _decode_transport(text: str) -> str:
    # Accept both the URL-safe and the standard alphabet
    raw = base64.b64decode(text.encode("ascii"), altchars=b"-_", validate=True)
    return raw.decode("utf-8")


class AuthToken:
    """Authorization token passed between the service and its clients.

    Create one fresh (``AuthToken()``) or reconstruct a presented one with
    ``AuthToken.from_string``. The sendable form is the ``token`` property.
    """

    def __init__(
        self,
        srv: str = "",
        sid: str = "",
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
    ):
        self._lock = threading.RLock()
        self._properties: Dict[str, str] = {
            PROP_SERVICE: srv,
            PROP_EXPIRATION: format_expiration(expiration_from_now(lifetime)),
            PROP_SESSION: sid,
            PROP_SECRET: random_string(SECRET_LENGTH),
        }
        self._raw_override: Optional[str] = None
        self._wire: Optional[str] = None
        self._wire_body: Optional[str] = None
        self._dirty = True
        self.build_count = 0

    @classmethod
    def _empty(cls) -> "AuthToken":
        token = cls.__new__(cls)
        token._lock = threading.RLock()
        token._properties = {}
        token._raw_override = None
        token._wire = None
        token._wire_body = None
        token._dirty = True
        token.build_count = 0
        return token

    @classmethod
    def opaque(cls, raw: str) -> "AuthToken":
        """Build an opaque token whose wire form is ``raw`` verbatim."""
        token = cls._empty()
        token._raw_override = raw
        return token

    @classmethod
    def from_string(cls, token_string: str) -> "AuthToken":
        """Reconstruct a token from a presented wire string.

        Base64 that decodes to a JSON object yields a structured token. Any
        other input (bad Base64, bad UTF-8, non-object text, malformed JSON)
        yields an opaque token holding the original input. Never raises.
        """
        if token_string is None:
            token_string = ""
        try:
            text = _decode_transport(token_string)
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Token is not Base64 ({e}); treating as opaque")
            return cls.opaque(token_string)

        if not text.lstrip().startswith("{"):
            return cls.opaque(token_string)

        try:
            document = json.loads(text)
            if not isinstance(document, dict):
                raise ValueError("token body is not an object")
            properties = {str(k): _property_value(v) for k, v in document.items()}
        except (ValueError, RecursionError) as e:
            logger.debug(f"Token body did not parse ({e}); treating as opaque")
            return cls.opaque(token_string)

        token = cls._empty()
        token._properties = properties
        token._wire = token_string
        token._wire_body = text
        token._dirty = False
        return token

    # Property bag

    def add_property(self, key: str, value: str) -> None:
        with self._lock:
            self._properties[key] = value
            self._dirty = True

    set = add_property

    def get_property(self, key: str) -> Optional[str]:
        """Return the property value, or ``None`` if it was never set."""
        with self._lock:
            return self._properties.get(key)

    get = get_property

    def has_property(self, key: str) -> bool:
        with self._lock:
            return key in self._properties

    def properties(self) -> Iterator[Tuple[str, str]]:
        """Iterate ``(key, value)`` pairs in insertion order over a snapshot."""
        with self._lock:
            snapshot = list(self._properties.items())
        return iter(snapshot)

    def for_each_property(self, action: Callable[[str, str], Any]) -> None:
        for key, value in self.properties():
            action(key, value)

    def to_dict(self) -> Dict[str, str]:
        return dict(self.properties())

    @property
    def srv(self) -> Optional[str]:
        return self.get_property(PROP_SERVICE)

    @srv.setter
    def srv(self, value: str) -> None:
        self.add_property(PROP_SERVICE, value)

    @property
    def sid(self) -> Optional[str]:
        return self.get_property(PROP_SESSION)

    @sid.setter
    def sid(self, value: str) -> None:
        self.add_property(PROP_SESSION, value)

    @property
    def exp(self) -> datetime:
        return parse_expiration(self.get_property(PROP_EXPIRATION))

    @exp.setter
    def exp(self, value: datetime) -> None:
        self.add_property(PROP_EXPIRATION, format_expiration(value))

    @property
    def secret(self) -> Optional[str]:
        return self.get_property(PROP_SECRET)

    def expiration_string(self) -> str:
        return format_expiration(self.exp)

    def is_expired(self, now: Optional[datetime] = None, clock_skew: timedelta = timedelta(0)) -> bool:
        return is_expired(self.exp, now=now, clock_skew=clock_skew)

    # Wire form

    @property
    def mode(self) -> TokenMode:
        return TokenMode.OPAQUE if self._raw_override is not None else TokenMode.STRUCTURED

    @property
    def is_opaque(self) -> bool:
        return self._raw_override is not None

    @property
    def token(self) -> str:
        """The wire string handed to clients, rebuilt first if stale."""
        with self._lock:
            if self._dirty:
                self._build_wire()
                self._dirty = False
            return self._wire

    @property
    def token_json(self) -> str:
        """The pre-encoding body of the wire string (for diagnostics)."""
        with self._lock:
            _ = self.token
            return self._wire_body

    def _build_wire(self) -> None:
        with self._lock:
            self.build_count += 1
            if self._raw_override is not None:
                self._wire = self._raw_override
                self._wire_body = self._raw_override
                return
            document = {k: v for k, v in self._properties.items() if v}
            self._wire_body = json.dumps(document, separators=(",", ":"))
            self._wire = base64.urlsafe_b64encode(self._wire_body.encode("utf-8")).decode("ascii")

    # Comparison

    def matches(self, other: Union["AuthToken", str]) -> bool:
        """Check that the significant pieces (``Sid`` and ``Secret``) agree.

        Unlike ``==`` this tolerates differences in other properties and in
        JSON layout. Opaque tokens have neither piece, so they match only an
        opaque token carrying the same raw string.
        """
        if isinstance(other, str):
            other = AuthToken.from_string(other)
        if not isinstance(other, AuthToken):
            return False
        if self.is_opaque or other.is_opaque:
            return self.is_opaque and other.is_opaque and self._raw_override == other._raw_override
        secret = self.secret
        if not secret:
            return False
        return self.sid == other.sid and secret == other.secret

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AuthToken):
            return self.token == other.token
        if isinstance(other, str):
            return self.token == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.token)

    def __str__(self) -> str:
        return self.token

    def __repr__(self) -> str:
        wire = self.token
        if len(wire) > 24:
            wire = wire[:24] + "..."
        if self.is_opaque:
            return f"AuthToken(mode=opaque, token={wire!r})"
        return f"AuthToken(mode=structured, srv={self.srv!r}, sid={self.sid!r}, token={wire!r})"

    def dump(self) -> str:
        """Multi-line listing of the token's mode and properties."""
        lines = [f"mode={self.mode.value}"]
        if self.is_opaque:
            lines.append(f"raw={self._raw_override}")
        for key, value in self.properties():
            lines.append(f"{key}={value}")
        return "\n".join(lines)


def create_auth_token(service_name: str = "", session_id: str = "", lifetime: Optional[timedelta] = None,
                      **extra: str) -> AuthToken:
    """Create a fresh structured token, adding ``extra`` as properties."""
    token = AuthToken(srv=service_name, sid=session_id, lifetime=lifetime or DEFAULT_TOKEN_LIFETIME)
    for key, value in extra.items():
        token.add_property(key, value)
    return token


__all__ = [
    "AuthToken",
    "TokenMode",
    "PROP_SERVICE",
    "PROP_SESSION",
    "PROP_EXPIRATION",
    "PROP_SECRET",
    "SECRET_LENGTH",
    "random_string",
    "create_auth_token",
]
