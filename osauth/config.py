"""
Configuration for OSAuth.

Settings come from keyword arguments, a mapping, environment variables
(``OSAUTH_*``) or an INI file with an ``[OSAuth]`` section.
"""

import configparser
import logging
import os
from dataclasses import dataclass, field, fields
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError
from .token.expiration import DEFAULT_TOKEN_LIFETIME
from .token.signing import HMACSigner, NoopSigner
from .validation import ComparisonPolicy, ValidationPolicy

logger = logging.getLogger(__name__)

ENV_PREFIX = "OSAUTH_"
INI_SECTION = "OSAuth"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _to_seconds(name: str, value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    try:
        return timedelta(seconds=float(value))
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid duration (seconds) for {name}: {value!r}")


def _to_comparison(name: str, value: Any) -> ComparisonPolicy:
    if isinstance(value, ComparisonPolicy):
        return value
    try:
        return ComparisonPolicy(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Invalid comparison policy for {name}: {value!r}")


@dataclass
class AuthConfig:
    """Settings for the auth module, its validator and its token store."""
    enabled: bool = False
    token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME

    # Validation
    comparison: ComparisonPolicy = ComparisonPolicy.EXACT
    enforce_expiration: bool = False
    clock_skew: timedelta = field(default_factory=lambda: timedelta(0))
    require_token: bool = False
    signing_key: Optional[str] = None

    # Token store
    store_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "osauth:token"
    sweep_interval: timedelta = field(default_factory=lambda: timedelta(minutes=5))

    log_level: str = "info"

    def __post_init__(self):
        self.enabled = _to_bool("enabled", self.enabled)
        self.enforce_expiration = _to_bool("enforce_expiration", self.enforce_expiration)
        self.require_token = _to_bool("require_token", self.require_token)
        self.token_lifetime = _to_seconds("token_lifetime", self.token_lifetime)
        self.clock_skew = _to_seconds("clock_skew", self.clock_skew)
        self.sweep_interval = _to_seconds("sweep_interval", self.sweep_interval)
        self.comparison = _to_comparison("comparison", self.comparison)
        self.store_backend = str(self.store_backend).strip().lower()
        if self.store_backend not in ("memory", "redis"):
            raise ConfigurationError(f"Unknown store backend: {self.store_backend!r}")
        if self.token_lifetime <= timedelta(0):
            raise ConfigurationError("token_lifetime must be positive")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AuthConfig":
        """Build from a mapping; keys are matched case-insensitively, unknown keys ignored."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = key.strip().lower()
            if name in known:
                kwargs[name] = value
            else:
                logger.debug(f"Ignoring unknown config key {key!r}")
        return cls(**kwargs)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> "AuthConfig":
        environ = os.environ if environ is None else environ
        values = {
            key[len(prefix):]: value
            for key, value in environ.items()
            if key.upper().startswith(prefix.upper())
        }
        return cls.from_dict(values)

    @classmethod
    def from_ini(cls, path: Union[str, os.PathLike], section: str = INI_SECTION) -> "AuthConfig":
        parser = configparser.ConfigParser()
        if not parser.read(path):
            raise ConfigurationError(f"Config file not readable: {path}")
        if not parser.has_section(section):
            # A missing section leaves the module disabled
            logger.info(f"No [{section}] section in {path}; using defaults")
            return cls()
        return cls.from_dict(dict(parser.items(section)))

    def to_policy(self) -> ValidationPolicy:
        signer = HMACSigner(self.signing_key) if self.signing_key else NoopSigner()
        return ValidationPolicy(
            comparison=self.comparison,
            enforce_expiration=self.enforce_expiration,
            clock_skew=self.clock_skew,
            require_token=self.require_token,
            signer=signer,
        )


def configure_logging(level: Union[str, int] = "info") -> None:
    """Configure root logging for scripts and examples."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "AuthConfig",
    "ENV_PREFIX",
    "INI_SECTION",
    "configure_logging",
]
