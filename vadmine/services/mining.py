"""
Mining accrual: start / stop / claim over the two-state mining ledger.

Accrual is never ticked. A running session only stores its start time and the
reward is computed from elapsed wall-clock time when it is claimed, linear up
to DAILY_MAX and flat after 24h.

Stop forfeits whatever the running session has accrued; clients that want to
keep it claim first (claiming also ends the session). Start while already
running keeps the original session start, so a double tap cannot reset the
accrual clock.
"""

from datetime import datetime

from vadmine.core.clock import DAY_SECONDS, Clock, SystemClock, capped_elapsed_seconds
from vadmine.core.logging import get_logger
from vadmine.models.ledger import MiningIdle, MiningRunning, RewardLedger
from vadmine.services.operation import reward_operation
from vadmine.storage.base import LedgerStore, LedgerUpdate

log = get_logger(__name__)

DAILY_MAX = 4.8
MAX_SESSION_SECONDS = DAY_SECONDS


def compute_mining_reward(session_start: datetime | None, now: datetime) -> float:
    """Reward for a session started at session_start and claimed at now, in [0, DAILY_MAX]."""
    if session_start is None:
        return 0.0
    capped = capped_elapsed_seconds(session_start, now, MAX_SESSION_SECONDS)
    return (capped / MAX_SESSION_SECONDS) * DAILY_MAX


@reward_operation("start_mining")
async def start_mining(store: LedgerStore, uid: str, clock: Clock = SystemClock()) -> None:
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[bool]:
        if ledger is None:
            return LedgerUpdate(False)
        if ledger.mining.active:
            return LedgerUpdate(False)
        ledger.mining.state = MiningRunning(session_start=now)
        return LedgerUpdate(True, ledger)

    started = await store.transact(uid, body)
    if started:
        log.info("mining_started", uid=uid, session_start=now.isoformat())
    else:
        log.info("mining_start_ignored", uid=uid)


@reward_operation("stop_mining")
async def stop_mining(store: LedgerStore, uid: str, clock: Clock = SystemClock()) -> None:
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[float]:
        if ledger is None or not ledger.mining.active:
            return LedgerUpdate(0.0)
        forfeited = compute_mining_reward(ledger.mining.session_start, now)
        ledger.mining.state = MiningIdle()
        return LedgerUpdate(forfeited, ledger)

    forfeited = await store.transact(uid, body)
    log.info("mining_stopped", uid=uid, forfeited=round(forfeited, 6))


@reward_operation("claim_mining")
async def claim_mining(store: LedgerStore, uid: str, clock: Clock = SystemClock()) -> float:
    """Bank the running session's accrual and end it. 0 when there is no session or no ledger."""
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[float]:
        if ledger is None or ledger.mining.session_start is None:
            return LedgerUpdate(0.0)
        reward = compute_mining_reward(ledger.mining.session_start, now)
        ledger.mining.balance += reward
        ledger.mining.last_claimed_at = now
        ledger.mining.state = MiningIdle()
        return LedgerUpdate(reward, ledger)

    reward = await store.transact(uid, body)
    log.info("mining_claimed", uid=uid, reward=reward)
    return reward
