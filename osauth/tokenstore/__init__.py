"""
Token store package for OSAuth.

Holds the token issued for each service name, in memory or in Redis.
"""

from ..config import AuthConfig
from .store import ServiceTokenStore
from .memory import MemoryServiceTokenStore, create_memory_store
from .redis import RedisServiceTokenStore


def create_token_store(config: AuthConfig) -> ServiceTokenStore:
    """Build the store selected by ``config.store_backend``."""
    if config.store_backend == "redis":
        return RedisServiceTokenStore(
            url=config.redis_url,
            prefix=config.redis_prefix,
            token_lifetime=config.token_lifetime,
        )
    return MemoryServiceTokenStore(token_lifetime=config.token_lifetime)


__all__ = [
    "ServiceTokenStore",
    "MemoryServiceTokenStore",
    "RedisServiceTokenStore",
    "create_memory_store",
    "create_token_store",
]
