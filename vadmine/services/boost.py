"""
Boost limiter: up to BOOST_DAILY_LIMIT grants of BOOST_REWARD per 24h window,
each one paid only after the caller has a completed rewarded ad.

The window slides: every grant re-stamps last_reset, so the count only rolls
over once 24h have passed since the most recent boost, not the first one.
"""

from dataclasses import dataclass
from datetime import datetime

from vadmine.core.clock import DAY, Clock, SystemClock, ensure_utc, window_elapsed
from vadmine.core.logging import get_logger
from vadmine.models.ledger import BOOST_DAILY_LIMIT, RewardLedger
from vadmine.services.ads import ensure_receipt_unused, record_receipt
from vadmine.services.operation import reward_operation
from vadmine.storage.base import LedgerStore, LedgerUpdate

log = get_logger(__name__)

BOOST_REWARD = 0.5
BOOST_WINDOW = DAY


@dataclass
class BoostStatus:
    used: int
    remaining: int
    resets_at: datetime | None


def boost_status(ledger: RewardLedger, now: datetime) -> BoostStatus:
    boost = ledger.boost
    if window_elapsed(boost.last_reset, now, BOOST_WINDOW):
        return BoostStatus(used=0, remaining=BOOST_DAILY_LIMIT, resets_at=None)
    return BoostStatus(
        used=boost.used_today,
        remaining=BOOST_DAILY_LIMIT - boost.used_today,
        resets_at=ensure_utc(boost.last_reset) + BOOST_WINDOW,
    )


@reward_operation("claim_boost")
async def claim_boost(
    store: LedgerStore, uid: str, clock: Clock = SystemClock(), receipt_nonce: str | None = None
) -> float:
    """Grant one boost. Returns 0 when the window's limit is already used up.

    A receipt_nonce that already paid out raises AdNotCompletedError(reason="replayed").
    """
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[float]:
        if ledger is None:
            return LedgerUpdate(0.0)
        ensure_receipt_unused(ledger, "boost", receipt_nonce)
        boost = ledger.boost
        if window_elapsed(boost.last_reset, now, BOOST_WINDOW):
            boost.used_today = 0
            boost.last_reset = now
        if boost.used_today >= BOOST_DAILY_LIMIT:
            return LedgerUpdate(0.0)
        ledger.mining.balance += BOOST_REWARD
        boost.used_today += 1
        boost.last_reset = now
        boost.balance += BOOST_REWARD
        record_receipt(ledger, "boost", receipt_nonce, now)
        return LedgerUpdate(BOOST_REWARD, ledger)

    reward = await store.transact(uid, body)
    if reward:
        log.info("boost_granted", uid=uid, reward=reward)
    else:
        log.info("boost_limit_reached", uid=uid)
    return reward
