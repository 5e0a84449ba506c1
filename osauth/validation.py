"""Validation of presented credentials against the token issued for a context.

Validation is a comparison against a server-held copy of the token. Two
comparison policies exist:

- ``EXACT``: the presented string must equal the issued wire string
- ``MATCH``: the presented string is decoded and must carry the same ``Sid``
  and ``Secret`` as the issued token

Expiration is carried by every token but only enforced when the policy asks
for it. Signature checks go through a pluggable ``TokenSigner``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .token.signing import NoopSigner, TokenSigner
from .token.types import AuthToken

logger = logging.getLogger(__name__)

LOG_HEADER = "[OSAuth]"


class ComparisonPolicy(str, Enum):
    EXACT = "exact"
    MATCH = "match"


@dataclass
class ValidationPolicy:
    """How presented credentials are checked."""
    comparison: ComparisonPolicy = ComparisonPolicy.EXACT
    enforce_expiration: bool = False
    clock_skew: timedelta = timedelta(0)
    # No issued token yet means there is nothing to compare against
    require_token: bool = False
    signer: TokenSigner = field(default_factory=NoopSigner)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: str
    token: Optional[AuthToken] = None

    def __bool__(self) -> bool:
        return self.valid


class TokenValidator:
    """Decide whether a presented credential string authorizes a request."""

    def __init__(self, policy: Optional[ValidationPolicy] = None):
        self.policy = policy or ValidationPolicy()

    def validate(
        self,
        presented: Optional[str],
        expected: Optional[AuthToken] = None,
        now: Optional[datetime] = None,
    ) -> ValidationResult:
        result = self._validate(presented, expected, now)
        logger.debug(f"{LOG_HEADER} Validate: {presented}. Auth={result.valid} ({result.reason})")
        return result

    def _validate(
        self,
        presented: Optional[str],
        expected: Optional[AuthToken],
        now: Optional[datetime],
    ) -> ValidationResult:
        if expected is None:
            if self.policy.require_token:
                return ValidationResult(False, "token_required")
            # TODO: run the signer over the presented string once every issued token is signed
            return ValidationResult(True, "no_token_issued")

        if not presented:
            return ValidationResult(False, "missing_credential")

        if self.policy.comparison == ComparisonPolicy.MATCH:
            parsed = AuthToken.from_string(presented)
            if not expected.matches(parsed):
                return ValidationResult(False, "token_mismatch")
        else:
            if presented != expected.token:
                return ValidationResult(False, "token_mismatch")
            parsed = AuthToken.from_string(presented)

        if self.policy.enforce_expiration and expected.is_expired(now=now, clock_skew=self.policy.clock_skew):
            return ValidationResult(False, "token_expired", token=expected)

        if not self.policy.signer.verify(parsed):
            return ValidationResult(False, "invalid_signature", token=parsed)

        return ValidationResult(True, "ok", token=parsed)

    def validate_token(self, token: AuthToken, now: Optional[datetime] = None) -> ValidationResult:
        """Validate a token on its own, without a presented string."""
        if self.policy.enforce_expiration and token.is_expired(now=now, clock_skew=self.policy.clock_skew):
            result = ValidationResult(False, "token_expired", token=token)
        else:
            result = ValidationResult(True, "ok", token=token)
        logger.debug(f"{LOG_HEADER} Validate just token. Auth={result.valid}")
        return result


__all__ = [
    "ComparisonPolicy",
    "ValidationPolicy",
    "ValidationResult",
    "TokenValidator",
]
