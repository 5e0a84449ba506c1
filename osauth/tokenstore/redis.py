"""Redis-backed service token store.

Each service token is stored as its wire string at key
``{prefix}:svc:{service_name}``. Issuance uses ``SET NX`` so two processes
cannot both issue a token for the same service. Keys expire with the token's
``Exp`` when it is bounded; ``remove_expired`` catches anything left over.
Listing uses SCAN with a safety cap.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

import redis.asyncio as redis

from ..errors import DuplicateServiceTokenError
from ..token.expiration import DEFAULT_TOKEN_LIFETIME, FOREVER, utc_now
from ..token.signing import TokenSigner
from ..token.types import AuthToken
from .store import ServiceTokenStore

logger = logging.getLogger(__name__)


class RedisServiceTokenStore(ServiceTokenStore):
    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "osauth:token",
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        scan_page_size: int = 500,
        max_scan: int = 5000,
        client=None,
    ):
        super().__init__(token_lifetime)
        self.url = url
        self.prefix = prefix.rstrip(":")
        self.scan_page_size = scan_page_size
        self.max_scan = max_scan
        self._client = client

    async def _get_client(self):
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    # Key helpers
    def _service_key(self, service_name: str) -> str:
        return f"{self.prefix}:svc:{service_name}"

    def _service_name(self, key: str) -> str:
        return key[len(self._service_key("")):]

    def _pattern(self) -> str:
        return f"{self.prefix}:svc:*"

    @staticmethod
    def _ttl_seconds(token: AuthToken) -> Optional[int]:
        exp = token.exp
        if exp >= FOREVER:
            return None
        return max(1, int((exp - utc_now()).total_seconds()))

    async def create_for_service(self, service_name: str, signer: Optional[TokenSigner] = None,
                                 **properties: str) -> AuthToken:
        client = await self._get_client()
        token = self.new_token(service_name, signer, **properties)
        stored = await client.set(
            self._service_key(service_name),
            token.token,
            nx=True,
            ex=self._ttl_seconds(token),
        )
        if not stored:
            raise DuplicateServiceTokenError(service_name)
        logger.debug(f"Issued token for service {service_name}")
        return token

    async def put(self, service_name: str, token: AuthToken) -> None:
        client = await self._get_client()
        await client.set(self._service_key(service_name), token.token, ex=self._ttl_seconds(token))

    async def get(self, service_name: str) -> Optional[AuthToken]:
        client = await self._get_client()
        raw = await client.get(self._service_key(service_name))
        if raw is None:
            return None
        return AuthToken.from_string(raw)

    async def remove(self, service_name: str) -> bool:
        client = await self._get_client()
        return (await client.delete(self._service_key(service_name))) == 1

    async def names(self) -> List[str]:
        return [self._service_name(k) for k in await self._scan_keys()]

    async def remove_expired(self, now: Optional[datetime] = None) -> List[str]:
        client = await self._get_client()
        keys = await self._scan_keys()
        if not keys:
            return []
        pipe = client.pipeline()
        for key in keys:
            pipe.get(key)
        raws = await pipe.execute()
        expired = [
            key for key, raw in zip(keys, raws)
            if raw is not None and AuthToken.from_string(raw).is_expired(now=now)
        ]
        if expired:
            await client.delete(*expired)
            logger.info(f"Removed {len(expired)} expired service tokens")
        return [self._service_name(k) for k in expired]

    async def clear(self) -> int:
        client = await self._get_client()
        keys = await self._scan_keys()
        if not keys:
            return 0
        return await client.delete(*keys)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _scan_keys(self) -> List[str]:
        client = await self._get_client()
        cursor = 0
        keys: List[str] = []
        while True:
            cursor, page = await client.scan(cursor=cursor, match=self._pattern(), count=self.scan_page_size)
            keys.extend(page)
            if cursor == 0 or len(keys) >= self.max_scan:
                break
        return keys[:self.max_scan]


__all__ = ["RedisServiceTokenStore"]
