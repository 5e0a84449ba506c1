"""In-process service token store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..errors import DuplicateServiceTokenError
from ..token.expiration import DEFAULT_TOKEN_LIFETIME
from ..token.signing import TokenSigner
from ..token.types import AuthToken
from .store import ServiceTokenStore

logger = logging.getLogger(__name__)


class MemoryServiceTokenStore(ServiceTokenStore):
    """Dictionary-backed store; issue and remove are serialized by one lock."""

    def __init__(self, token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME):
        super().__init__(token_lifetime)
        self._tokens: Dict[str, AuthToken] = {}
        self._lock = asyncio.Lock()

    async def create_for_service(self, service_name: str, signer: Optional[TokenSigner] = None,
                                 **properties: str) -> AuthToken:
        async with self._lock:
            if service_name in self._tokens:
                raise DuplicateServiceTokenError(service_name)
            token = self.new_token(service_name, signer, **properties)
            self._tokens[service_name] = token
        logger.debug(f"Issued token for service {service_name}")
        return token

    async def put(self, service_name: str, token: AuthToken) -> None:
        async with self._lock:
            self._tokens[service_name] = token

    async def get(self, service_name: str) -> Optional[AuthToken]:
        return self._tokens.get(service_name)

    async def remove(self, service_name: str) -> bool:
        async with self._lock:
            removed = self._tokens.pop(service_name, None) is not None
        if removed:
            logger.debug(f"Removed token for service {service_name}")
        return removed

    async def names(self) -> List[str]:
        return list(self._tokens.keys())

    async def remove_expired(self, now: Optional[datetime] = None) -> List[str]:
        async with self._lock:
            expired = [name for name, token in self._tokens.items() if token.is_expired(now=now)]
            for name in expired:
                del self._tokens[name]
        if expired:
            logger.info(f"Removed {len(expired)} expired service tokens")
        return expired

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._tokens)
            self._tokens.clear()
        return count

    def get_statistics(self) -> Dict[str, int]:
        return {
            "total_tokens": len(self._tokens),
            "expired_tokens": sum(1 for t in self._tokens.values() if t.is_expired()),
        }


def create_memory_store(token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME) -> MemoryServiceTokenStore:
    return MemoryServiceTokenStore(token_lifetime)


__all__ = ["MemoryServiceTokenStore", "create_memory_store"]
