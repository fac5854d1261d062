"""
Daily check-in: one claim per 24h, streak grows on each claim and restarts
after a gap of 48h or more. Rewards follow a 7-day table (0.1 per streak day,
2.0 on day 7) that repeats from day 8 on.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from vadmine.core.clock import DAY, Clock, SystemClock, ensure_utc, remaining_until
from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger
from vadmine.services.ads import ensure_receipt_unused, record_receipt
from vadmine.services.operation import reward_operation
from vadmine.storage.base import LedgerStore, LedgerUpdate

log = get_logger(__name__)

STREAK_REWARDS = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 2.0)
STREAK_BREAK = 2 * DAY


def reward_for_streak(streak: int) -> float:
    if streak < 1:
        return 0.0
    return STREAK_REWARDS[(streak - 1) % len(STREAK_REWARDS)]


def _streak_after_claim(streak: int, last_claim: datetime | None, now: datetime) -> int:
    if last_claim is not None and ensure_utc(now) - ensure_utc(last_claim) >= STREAK_BREAK:
        streak = 0
    return streak + 1


@dataclass
class DailyStatus:
    streak: int
    can_claim: bool
    cooldown: timedelta
    next_reward: float
    rewards: tuple[float, ...] = STREAK_REWARDS


def daily_status(ledger: RewardLedger, now: datetime) -> DailyStatus:
    daily = ledger.daily_claim
    cooldown = remaining_until(daily.last_claim, now, DAY)
    streak = daily.streak
    if daily.last_claim is not None and ensure_utc(now) - ensure_utc(daily.last_claim) >= STREAK_BREAK:
        streak = 0  # what the next claim will see
    return DailyStatus(
        streak=streak,
        can_claim=cooldown == timedelta(0),
        cooldown=cooldown,
        next_reward=reward_for_streak(_streak_after_claim(daily.streak, daily.last_claim, now)),
    )


@reward_operation("claim_daily")
async def claim_daily(
    store: LedgerStore, uid: str, clock: Clock = SystemClock(), receipt_nonce: str | None = None
) -> float:
    """Claim today's check-in. Returns 0 when already claimed within the last 24h."""
    now = clock.now()

    def body(ledger: RewardLedger | None) -> LedgerUpdate[float]:
        if ledger is None:
            return LedgerUpdate(0.0)
        ensure_receipt_unused(ledger, "daily", receipt_nonce)
        daily = ledger.daily_claim
        if daily.last_claim is not None and ensure_utc(now) - daily.last_claim < DAY:
            return LedgerUpdate(0.0)
        streak = _streak_after_claim(daily.streak, daily.last_claim, now)
        reward = reward_for_streak(streak)
        ledger.mining.balance += reward
        daily.last_claim = now
        daily.streak = streak
        daily.total_earned += reward
        record_receipt(ledger, "daily", receipt_nonce, now)
        return LedgerUpdate(reward, ledger)

    reward = await store.transact(uid, body)
    if reward:
        log.info("daily_claimed", uid=uid, reward=reward)
    else:
        log.info("daily_already_claimed", uid=uid)
    return reward
