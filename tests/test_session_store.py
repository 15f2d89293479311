"""
In-memory store tests.
"""

import pytest

from teleconsult.adapters.stores import InMemoryRateLimitStore, InMemorySessionStore
from teleconsult.application.ports.repositories.rate_limit_store import ClientRequestLog
from teleconsult.domain.entities.access_session import ConsultationAccessSession
from teleconsult.domain.entities.otp_session import OtpSession

NOW = 1_700_000_000.0


def _otp(mobile_hash: str = "mh", created_at: float = NOW, ttl: float = 300) -> OtpSession:
    return OtpSession(
        appointment_number="APT123",
        mobile_hash=mobile_hash,
        masked_mobile="******3210",
        otp_hash="h",
        otp_salt="s",
        link_hash="lh",
        created_at=created_at,
        expires_at=created_at + ttl,
    )


@pytest.mark.asyncio
async def test_set_get_delete():
    store = InMemorySessionStore()
    await store.set("p1", _otp())

    assert (await store.get("p1")).appointment_number == "APT123"
    assert await store.count() == 1
    assert await store.delete("p1") is True
    assert await store.delete("p1") is False
    assert await store.get("p1") is None


@pytest.mark.asyncio
async def test_find_matches_predicate():
    store = InMemorySessionStore()
    await store.set("p1", _otp("a"))
    await store.set("p2", _otp("b"))
    await store.set("p3", _otp("a", created_at=NOW + 10))

    found = await store.find(lambda s: s.mobile_hash == "a")

    assert sorted(key for key, _ in found) == ["p1", "p3"]


@pytest.mark.asyncio
async def test_sweep_removes_only_expired_entries():
    store = InMemorySessionStore()
    await store.set("old", _otp(created_at=NOW - 400))
    await store.set("fresh", _otp(created_at=NOW))
    await store.set(
        "token", ConsultationAccessSession("APT1", "mh", "lh", expires_at=NOW)
    )

    removed = await store.sweep(NOW)

    # expiry is inclusive: expires_at == now counts as expired
    assert removed == 2
    assert await store.get("fresh") is not None
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_rate_limit_store_evicts_idle_clients():
    store = InMemoryRateLimitStore()
    await store.save("idle", ClientRequestLog(timestamps=[NOW - 5000], last_seen=NOW - 5000))
    await store.save("active", ClientRequestLog(timestamps=[NOW], last_seen=NOW))
    await store.save(
        "blocked",
        ClientRequestLog(timestamps=[], blocked_until=NOW + 100, last_seen=NOW - 5000),
    )

    removed = await store.evict_idle(NOW - 3600)

    assert removed == 1
    assert await store.load("idle") is None
    assert await store.load("blocked") is not None
    assert await store.size() == 2
