from datetime import timedelta

import pytest

from osauth.config import AuthConfig
from osauth.errors import ConfigurationError
from osauth.token import HMACSigner, NoopSigner
from osauth.validation import ComparisonPolicy


def test_defaults():
    config = AuthConfig()
    assert not config.enabled
    assert config.token_lifetime == timedelta(hours=4)
    assert config.comparison == ComparisonPolicy.EXACT
    assert not config.enforce_expiration
    assert config.store_backend == "memory"


def test_from_env():
    environ = {
        "OSAUTH_ENABLED": "true",
        "OSAUTH_TOKEN_LIFETIME": "600",
        "OSAUTH_COMPARISON": "MATCH",
        "OSAUTH_ENFORCE_EXPIRATION": "yes",
        "OSAUTH_UNKNOWN": "ignored",
        "OTHER_VAR": "x",
    }
    config = AuthConfig.from_env(environ=environ)
    assert config.enabled
    assert config.token_lifetime == timedelta(minutes=10)
    assert config.comparison == ComparisonPolicy.MATCH
    assert config.enforce_expiration


def test_from_ini(tmp_path):
    path = tmp_path / "region.ini"
    path.write_text("[OSAuth]\nEnabled = true\nStore_Backend = redis\nRedis_Prefix = region1\n")
    config = AuthConfig.from_ini(path)
    assert config.enabled
    assert config.store_backend == "redis"
    assert config.redis_prefix == "region1"


def test_from_ini_without_section(tmp_path):
    path = tmp_path / "region.ini"
    path.write_text("[Other]\nEnabled = true\n")
    assert not AuthConfig.from_ini(path).enabled


def test_from_ini_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        AuthConfig.from_ini(tmp_path / "missing.ini")


@pytest.mark.parametrize("values", [
    {"enabled": "maybe"},
    {"token_lifetime": "soon"},
    {"token_lifetime": "0"},
    {"comparison": "fuzzy"},
    {"store_backend": "postgres"},
])
def test_invalid_values(values):
    with pytest.raises(ConfigurationError):
        AuthConfig.from_dict(values)


def test_to_policy():
    policy = AuthConfig(comparison="match", enforce_expiration=True, clock_skew=30).to_policy()
    assert policy.comparison == ComparisonPolicy.MATCH
    assert policy.enforce_expiration
    assert policy.clock_skew == timedelta(seconds=30)
    assert isinstance(policy.signer, NoopSigner)
    assert isinstance(AuthConfig(signing_key="k").to_policy().signer, HMACSigner)
