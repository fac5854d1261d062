"""
Live balance projection for display between syncs. Pure and read-only: the
number it produces is never written back, only claim_mining banks accrual.
"""

from dataclasses import dataclass
from datetime import datetime

from vadmine.models.ledger import RewardLedger
from vadmine.services.boost import BoostStatus, boost_status
from vadmine.services.daily import DailyStatus, daily_status
from vadmine.services.mining import compute_mining_reward

REFERRAL_BONUS_PER_REFERRAL = 0.1


def get_live_balance(snapshot: RewardLedger | None, now: datetime) -> float:
    """Synced balance plus what the running session would pay if claimed at now."""
    if snapshot is None:
        return 0.0
    mining = snapshot.mining
    if not mining.active:
        return mining.balance
    return mining.balance + compute_mining_reward(mining.session_start, now)


def referral_bonus(referrer: RewardLedger | None) -> float:
    """
    Display-only bonus shown to a referred user, scaled by how many users their
    referrer has brought in. Users without a referrer see 0. Not part of the balance.
    """
    if referrer is None:
        return 0.0
    return referrer.referrals.total_referred * REFERRAL_BONUS_PER_REFERRAL


@dataclass
class LedgerView:
    ledger: RewardLedger
    live_balance: float
    pending_mining_reward: float
    referral_bonus: float
    boost: BoostStatus
    daily: DailyStatus


def project(snapshot: RewardLedger, now: datetime, referrer: RewardLedger | None = None) -> LedgerView:
    return LedgerView(
        ledger=snapshot,
        live_balance=get_live_balance(snapshot, now),
        pending_mining_reward=compute_mining_reward(snapshot.mining.session_start, now),
        referral_bonus=referral_bonus(referrer),
        boost=boost_status(snapshot, now),
        daily=daily_status(snapshot, now),
    )
