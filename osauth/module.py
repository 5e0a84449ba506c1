"""
Auth module: the host-facing adapter around tokens, the token store and the
validator.

A host creates one ``AuthModule`` per region, calls ``initialize`` with its
configuration and then issues, looks up and validates tokens per service.
Expired tokens are dropped by ``sweep_expired``, either on demand or from the
background task started with ``start_sweeper``.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .config import AuthConfig
from .token.types import AuthToken
from .tokenstore import ServiceTokenStore, create_token_store
from .validation import TokenValidator, ValidationResult

logger = logging.getLogger(__name__)

LOG_HEADER = "[OSAuth]"


class AuthModule:
    """Central store and validator for service auth tokens in a region."""

    name = "OSAuthModule"

    def __init__(self, config: Optional[AuthConfig] = None, token_store: Optional[ServiceTokenStore] = None):
        self.config = config or AuthConfig()
        self.enabled = False
        self.region: Optional[str] = None
        self.token_store = token_store
        self.validator = TokenValidator(self.config.to_policy())
        self._sweeper: Optional[asyncio.Task] = None
        self._initialized = False

    def initialize(self, config: Optional[AuthConfig] = None) -> None:
        if config is not None:
            self.config = config
            self.validator = TokenValidator(config.to_policy())
        self.enabled = self.config.enabled
        if self.enabled:
            logger.info(f"{LOG_HEADER} Enabled")
        if self.token_store is None:
            self.token_store = create_token_store(self.config)
        self._initialized = True

    def _require_store(self) -> ServiceTokenStore:
        if not self._initialized:
            self.initialize()
        return self.token_store

    def add_region(self, region: str) -> None:
        self.region = region
        logger.debug(f"{LOG_HEADER} Added region {region}")

    async def remove_region(self, region: str) -> None:
        if self.region is not None:
            await self.close()
            self.region = None

    async def close(self) -> None:
        await self.stop_sweeper()
        if self.token_store is not None:
            await self.token_store.close()

    # Service tokens

    async def create_auth_for_service(self, service_name: str, **properties: str) -> AuthToken:
        """Issue a token for the service, signed if a signing key is configured.

        Raises:
            DuplicateServiceTokenError: if the service already has a token
        """
        store = self._require_store()
        token = await store.create_for_service(service_name, self.validator.policy.signer, **properties)
        logger.debug(f"{LOG_HEADER} Created auth for service {service_name}")
        return token

    async def get_service_auth(self, service_name: str) -> Optional[AuthToken]:
        return await self._require_store().get(service_name)

    async def remove_service_auth(self, service_name: str) -> bool:
        return await self._require_store().remove(service_name)

    # Validation

    def validate(self, auth_string: Optional[str], token: Optional[AuthToken] = None) -> bool:
        return self.check(auth_string, token).valid

    def check(self, auth_string: Optional[str], token: Optional[AuthToken] = None) -> ValidationResult:
        return self.validator.validate(auth_string, token)

    def validate_token(self, token: AuthToken) -> bool:
        return self.validator.validate_token(token).valid

    async def validate_for_service(self, auth_string: Optional[str], service_name: str) -> bool:
        expected = await self.get_service_auth(service_name)
        return self.validate(auth_string, expected)

    # Expiration sweep

    async def sweep_expired(self, now: Optional[datetime] = None) -> List[str]:
        removed = await self._require_store().remove_expired(now=now)
        for service_name in removed:
            logger.debug(f"{LOG_HEADER} Expired auth for service {service_name}")
        return removed

    def start_sweeper(self, interval: Optional[timedelta] = None) -> asyncio.Task:
        """Start periodic expired-token removal on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper
        seconds = (interval or self.config.sweep_interval).total_seconds()
        self._sweeper = asyncio.create_task(self._sweep_loop(seconds))
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_loop(self, seconds: float) -> None:
        while True:
            await asyncio.sleep(seconds)
            try:
                await self.sweep_expired()
            except Exception as e:
                logger.error(f"{LOG_HEADER} Expired token sweep failed: {e}")


__all__ = ["AuthModule"]
