from datetime import timedelta

import pytest

from vadmine.models.ledger import new_ledger
from vadmine.services import boost

from conftest import T0


async def _claim(store, clock):
    return await boost.claim_boost(store, "alice-uid", clock)


async def test_three_boosts_then_limit(store, clock, ledger):
    rewards = []
    for _ in range(3):
        rewards.append(await _claim(store, clock))
        clock.advance(minutes=10)
    assert rewards == [0.5, 0.5, 0.5]
    version = store.version("alice-uid")

    assert await _claim(store, clock) == 0
    after = await store.get("alice-uid")
    assert after.boost.used_today == 3
    assert after.boost.balance == pytest.approx(1.5)
    assert after.mining.balance == pytest.approx(1.5)
    assert store.version("alice-uid") == version


async def test_first_boost_opens_window(store, clock, ledger):
    assert await _claim(store, clock) == 0.5
    after = await store.get("alice-uid")
    assert after.boost.used_today == 1
    assert after.boost.last_reset == T0


async def test_window_slides_from_last_grant(store, clock, ledger):
    for _ in range(3):
        await _claim(store, clock)
        clock.advance(hours=1)
    # 25h after the first grant but only 23h after the last one
    clock.current = T0 + timedelta(hours=25)
    assert await _claim(store, clock) == 0
    clock.current = T0 + timedelta(hours=26)
    assert await _claim(store, clock) == 0.5
    after = await store.get("alice-uid")
    assert after.boost.used_today == 1
    assert after.boost.last_reset == T0 + timedelta(hours=26)


async def test_stale_window_resets_before_grant(store, clock):
    seeded = new_ledger("alice-uid")
    seeded.boost.used_today = 3
    seeded.boost.last_reset = T0 - timedelta(days=2)
    await store.create(seeded)
    assert await _claim(store, clock) == 0.5
    assert (await store.get("alice-uid")).boost.used_today == 1


async def test_used_today_never_exceeds_limit(store, clock, ledger):
    for _ in range(20):
        await _claim(store, clock)
        clock.advance(hours=2)
        assert (await store.get("alice-uid")).boost.used_today <= 3


async def test_missing_ledger(store, clock):
    assert await boost.claim_boost(store, "ghost", clock) == 0


def test_boost_status():
    ledger = new_ledger("u1")
    status = boost.boost_status(ledger, T0)
    assert (status.used, status.remaining, status.resets_at) == (0, 3, None)

    ledger.boost.used_today = 2
    ledger.boost.last_reset = T0
    status = boost.boost_status(ledger, T0 + timedelta(hours=5))
    assert (status.used, status.remaining) == (2, 1)
    assert status.resets_at == T0 + timedelta(hours=24)

    status = boost.boost_status(ledger, T0 + timedelta(hours=24))
    assert status.remaining == 3
