"""
Service token store interface.

A store maps a service name to the single token issued for that service.
Issuing a second token for the same name is an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import List, Optional

from ..token.signing import TokenSigner
from ..token.types import AuthToken, create_auth_token
from ..token.expiration import DEFAULT_TOKEN_LIFETIME


class ServiceTokenStore(ABC):
    """Abstract per-service token registry."""

    def __init__(self, token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME):
        self.token_lifetime = token_lifetime

    def new_token(self, service_name: str, signer: Optional[TokenSigner] = None, **properties: str) -> AuthToken:
        token = create_auth_token(service_name, lifetime=self.token_lifetime, **properties)
        if signer is not None:
            signer.sign(token)
        return token

    @abstractmethod
    async def create_for_service(self, service_name: str, signer: Optional[TokenSigner] = None,
                                 **properties: str) -> AuthToken:
        """Issue a token for ``service_name``, signed by ``signer`` before it is stored.

        Raises:
            DuplicateServiceTokenError: if the service already holds a token
        """

    @abstractmethod
    async def put(self, service_name: str, token: AuthToken) -> None:
        """Store ``token`` for ``service_name``, replacing any existing one."""

    @abstractmethod
    async def get(self, service_name: str) -> Optional[AuthToken]:
        """Return the token for ``service_name`` or ``None``."""

    @abstractmethod
    async def remove(self, service_name: str) -> bool:
        """Remove the token; ``True`` if one was removed."""

    @abstractmethod
    async def names(self) -> List[str]:
        """Service names currently holding a token."""

    @abstractmethod
    async def remove_expired(self, now: Optional[datetime] = None) -> List[str]:
        """Drop expired tokens and return the affected service names."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove every token and return how many were removed."""

    async def count(self) -> int:
        return len(await self.names())

    async def exists(self, service_name: str) -> bool:
        return await self.get(service_name) is not None

    async def close(self) -> None:
        return None


__all__ = ["ServiceTokenStore"]
