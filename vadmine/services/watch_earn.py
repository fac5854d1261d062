from vadmine.core.clock import Clock, SystemClock
from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger
from vadmine.services.ads import ensure_receipt_unused, record_receipt
from vadmine.services.operation import reward_operation
from vadmine.storage.base import LedgerStore, LedgerUpdate

log = get_logger(__name__)

WATCH_REWARD = 0.25


@reward_operation("claim_watch_earn")
async def claim_watch_earn(
    store: LedgerStore, uid: str, clock: Clock = SystemClock(), receipt_nonce: str | None = None
) -> float:
    """Flat, uncapped reward for one completed rewarded ad. 0 only when the ledger is missing.

    Each receipt pays once; replaying its nonce raises AdNotCompletedError(reason="replayed").
    """
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[float]:
        if ledger is None:
            return LedgerUpdate(0.0)
        ensure_receipt_unused(ledger, "watch_earn", receipt_nonce)
        ledger.mining.balance += WATCH_REWARD
        ledger.watch_earn.total_watched += 1
        ledger.watch_earn.total_earned += WATCH_REWARD
        record_receipt(ledger, "watch_earn", receipt_nonce, now)
        return LedgerUpdate(WATCH_REWARD, ledger)

    reward = await store.transact(uid, body)
    log.info("watch_earn_granted", uid=uid, reward=reward)
    return reward
