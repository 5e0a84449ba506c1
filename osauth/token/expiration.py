"""Expiration time formatting and lenient parsing for auth tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# Returned for absent or unparsable expiration strings
FOREVER = datetime(2199, 12, 31, tzinfo=timezone.utc)

DEFAULT_TOKEN_LIFETIME = timedelta(hours=4)

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
    "%d %b %Y %H:%M:%S",
    "%a, %d %b %Y %H:%M:%S %Z",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_expiration(value: datetime) -> str:
    """Render a point in time as ISO-8601 with second precision and an offset.

    UTC is written with the ``Z`` designator; other offsets as ``+HH:MM``.
    Naive datetimes are taken to be UTC.
    """
    value = _as_aware(value).replace(microsecond=0)
    if value.utcoffset() == timedelta(0):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat(timespec="seconds")


def parse_expiration(value: Optional[str]) -> datetime:
    """Parse an expiration string, returning ``FOREVER`` when it cannot be read."""
    if not value:
        return FOREVER
    text = value.strip()
    try:
        return _as_aware(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return _as_aware(datetime.strptime(text, fmt))
        except ValueError:
            continue
    logger.debug(f"Unparsable expiration '{value}', treating as unbounded")
    return FOREVER


def expiration_from_now(lifetime: timedelta = DEFAULT_TOKEN_LIFETIME, now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) + lifetime


def is_expired(expiration: datetime, now: Optional[datetime] = None, clock_skew: timedelta = timedelta(0)) -> bool:
    """Check whether ``expiration`` lies in the past, allowing ``clock_skew``."""
    now = _as_aware(now) if now else utc_now()
    return now > _as_aware(expiration) + clock_skew


__all__ = [
    "FOREVER",
    "DEFAULT_TOKEN_LIFETIME",
    "utc_now",
    "format_expiration",
    "parse_expiration",
    "expiration_from_now",
    "is_expired",
]
