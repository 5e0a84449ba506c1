#!/usr/bin/env python3
"""
Authentication Examples for OSAuth

This example walks through the token lifecycle:
- issuing a token for a service
- handing its wire string to a client and reconstructing it
- validating presented credentials (exact and matching comparison)
- accepting opaque shared-secret strings
- signing tokens and sweeping expired ones

Run this example to see how the pieces fit together.
"""

import asyncio
import logging
from datetime import timedelta

from osauth import (
    AuthConfig, AuthModule, AuthToken, configure_logging
)


configure_logging("info")
logger = logging.getLogger(__name__)


async def demo_issue_and_validate():
    """Issue a token and validate what a client sends back."""
    print("\n=== Issue and Validate ===")

    module = AuthModule()
    module.initialize(AuthConfig(enabled=True))

    token = await module.create_auth_for_service("avatar", Sid="abc123")
    print(f"✓ Token issued: {token.token[:32]}...")
    print(f"  Body: {token.token_json}")
    print(f"  Expires: {token.expiration_string()}")

    presented = token.token
    print(f"  Presented string valid: {module.validate(presented, token)}")
    print(f"  Wrong string valid: {module.validate('guess', token)}")

    decoded = AuthToken.from_string(presented)
    print(f"  Decoded Srv={decoded.srv} Sid={decoded.sid} matches={decoded.matches(token)}")
    await module.close()


async def demo_matching():
    """Matching compares only Sid and Secret."""
    print("\n=== Matching Comparison ===")

    module = AuthModule()
    module.initialize(AuthConfig(enabled=True, comparison="match"))
    token = await module.create_auth_for_service("avatar", Sid="abc123")

    presented = AuthToken.from_string(token.token)
    presented.exp = token.exp + timedelta(hours=1)
    print(f"  Same wire string: {presented == token}")
    print(f"  Matches: {presented.matches(token)}")
    print(f"  Valid under matching: {module.validate(presented.token, token)}")
    await module.close()


def demo_opaque():
    """Opaque strings pass through unchanged."""
    print("\n=== Opaque Tokens ===")

    token = AuthToken.from_string("region-shared-secret!")
    print(f"  Mode: {token.mode.value}")
    print(f"  Wire: {token.token}")


async def demo_signing_and_sweep():
    """Sign issued tokens and drop expired ones."""
    print("\n=== Signing and Expiration ===")

    module = AuthModule()
    module.initialize(AuthConfig(enabled=True, signing_key="demo-region-key", enforce_expiration=True))
    token = await module.create_auth_for_service("avatar")
    print(f"  Signature: {token.get_property('Sig')}")
    print(f"  Valid: {module.validate(token.token, token)}")

    await module.token_store.put("stale", AuthToken(srv="stale", lifetime=timedelta(minutes=-1)))
    removed = await module.sweep_expired()
    print(f"  Swept: {removed}")
    await module.close()


async def main():
    await demo_issue_and_validate()
    await demo_matching()
    demo_opaque()
    await demo_signing_and_sweep()


if __name__ == "__main__":
    asyncio.run(main())
