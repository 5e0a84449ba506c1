import asyncio
from datetime import timedelta

import pytest

from osauth.errors import DuplicateServiceTokenError
from osauth.token import AuthToken, HMACSigner, utc_now
from osauth.tokenstore import MemoryServiceTokenStore, create_memory_store

pytestmark = pytest.mark.asyncio


async def test_create_get_remove():
    store = MemoryServiceTokenStore()
    token = await store.create_for_service("avatar")
    assert token.srv == "avatar"
    assert token.secret
    assert await store.get("avatar") is token
    assert await store.exists("avatar")
    assert await store.names() == ["avatar"]
    assert await store.count() == 1

    assert await store.remove("avatar") is True
    assert await store.remove("avatar") is False
    assert await store.get("avatar") is None


async def test_duplicate_issuance_rejected():
    store = create_memory_store()
    await store.create_for_service("avatar")
    with pytest.raises(DuplicateServiceTokenError) as exc:
        await store.create_for_service("avatar")
    assert exc.value.service_name == "avatar"
    assert exc.value.code == "DUPLICATE_SERVICE_TOKEN"


async def test_concurrent_issuance_yields_single_token():
    store = MemoryServiceTokenStore()
    results = await asyncio.gather(
        *(store.create_for_service("avatar") for _ in range(10)),
        return_exceptions=True,
    )
    issued = [r for r in results if isinstance(r, AuthToken)]
    rejected = [r for r in results if isinstance(r, DuplicateServiceTokenError)]
    assert len(issued) == 1
    assert len(rejected) == 9


async def test_extra_properties_and_lifetime():
    store = MemoryServiceTokenStore(token_lifetime=timedelta(minutes=10))
    token = await store.create_for_service("avatar", Sid="sess-1", Region="r1")
    assert token.sid == "sess-1"
    assert token.get_property("Region") == "r1"
    assert token.exp - utc_now() <= timedelta(minutes=10)


async def test_signer_applied_before_storing():
    signer = HMACSigner("region-key")
    store = MemoryServiceTokenStore()
    token = await store.create_for_service("avatar", signer, Sid="sess-1")
    stored = await store.get("avatar")
    assert stored.get_property("Sig")
    assert signer.verify(stored)
    assert stored == token


async def test_put_replaces():
    store = MemoryServiceTokenStore()
    await store.create_for_service("avatar")
    replacement = AuthToken.opaque("shared-secret")
    await store.put("avatar", replacement)
    assert (await store.get("avatar")).token == "shared-secret"


async def test_remove_expired():
    store = MemoryServiceTokenStore()
    await store.create_for_service("fresh")
    await store.put("stale", AuthToken(srv="stale", lifetime=timedelta(minutes=-1)))
    await store.put("opaque", AuthToken.opaque("never-expires"))

    removed = await store.remove_expired()
    assert removed == ["stale"]
    assert sorted(await store.names()) == ["fresh", "opaque"]

    later = utc_now() + timedelta(hours=5)
    assert await store.remove_expired(now=later) == ["fresh"]
    assert store.get_statistics()["total_tokens"] == 1


async def test_clear():
    store = MemoryServiceTokenStore()
    await store.create_for_service("a")
    await store.create_for_service("b")
    assert await store.clear() == 2
    assert await store.count() == 0
