import pytest

from vadmine.core.exceptions import AdNotCompletedError, NotAuthenticatedError
from vadmine.services.watch_earn import WATCH_REWARD, claim_watch_earn

from conftest import FakeClock

pytestmark = pytest.mark.asyncio


async def test_rewards_add_up(store, ledger):
    for _ in range(12):
        assert await claim_watch_earn(store, "alice-uid") == WATCH_REWARD
    after = await store.get("alice-uid")
    assert after.watch_earn.total_watched == 12
    assert after.watch_earn.total_earned == pytest.approx(0.25 * 12)
    assert after.mining.balance == pytest.approx(3.0)


async def test_missing_ledger(store):
    assert await claim_watch_earn(store, "ghost") == 0


async def test_requires_uid(store):
    with pytest.raises(NotAuthenticatedError):
        await claim_watch_earn(store, None)


async def test_replayed_nonce_is_rejected(store, ledger, clock):
    assert await claim_watch_earn(store, "alice-uid", clock, receipt_nonce="ad-1") == WATCH_REWARD
    with pytest.raises(AdNotCompletedError) as exc:
        await claim_watch_earn(store, "alice-uid", clock, receipt_nonce="ad-1")
    assert exc.value.details == {"reason": "replayed"}
    assert await claim_watch_earn(store, "alice-uid", clock, receipt_nonce="ad-2") == WATCH_REWARD

    after = await store.get("alice-uid")
    assert after.watch_earn.total_watched == 2
    assert [r.nonce for r in after.ad_receipts] == ["ad-1", "ad-2"]


async def test_old_receipts_are_pruned(store, ledger, clock: FakeClock):
    await claim_watch_earn(store, "alice-uid", clock, receipt_nonce="ad-1")
    clock.advance(seconds=301)
    await claim_watch_earn(store, "alice-uid", clock, receipt_nonce="ad-2")
    after = await store.get("alice-uid")
    assert [r.nonce for r in after.ad_receipts] == ["ad-2"]
