"""Per-user reward ledger.

Four independent sub-ledgers (mining, boost, daily_claim, watch_earn) share one
parent document. Values are validated once at the store boundary so services
never deal with missing sub-objects or ad-hoc defaults.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from vadmine.core.clock import ensure_utc

BOOST_DAILY_LIMIT = 3


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class LedgerModel(BaseModel):
    model_config = ConfigDict(validate_assignment=True)


class MiningIdle(LedgerModel):
    status: Literal["idle"] = "idle"


class MiningRunning(LedgerModel):
    status: Literal["running"] = "running"
    session_start: UtcDatetime


MiningState = Annotated[Union[MiningIdle, MiningRunning], Field(discriminator="status")]


class MiningLedger(LedgerModel):
    """
    Two-state machine: Idle -> Running on start; Running -> Idle on claim (banks
    the accrued reward) or on stop (forfeits it). There is no way to be active
    without a session start.
    """
    state: MiningState = Field(default_factory=MiningIdle)
    last_claimed_at: UtcDatetime | None = None
    balance: float = Field(default=0.0, ge=0)

    @property
    def active(self) -> bool:
        return isinstance(self.state, MiningRunning)

    @property
    def session_start(self) -> datetime | None:
        return self.state.session_start if isinstance(self.state, MiningRunning) else None


class BoostLedger(LedgerModel):
    used_today: int = Field(default=0, ge=0, le=BOOST_DAILY_LIMIT)
    last_reset: UtcDatetime | None = None
    balance: float = Field(default=0.0, ge=0)


class DailyClaimLedger(LedgerModel):
    last_claim: UtcDatetime | None = None
    streak: int = Field(default=0, ge=0)
    total_earned: float = Field(default=0.0, ge=0)


class WatchEarnLedger(LedgerModel):
    total_watched: int = Field(default=0, ge=0)
    total_earned: float = Field(default=0.0, ge=0)


class ReferralLedger(LedgerModel):
    total_referred: int = Field(default=0, ge=0)
    referred_users: list[str] = Field(default_factory=list)


class ConsumedReceipt(LedgerModel):
    """An ad receipt that already paid out; kept until the receipt itself would have expired."""
    placement: str
    nonce: str = Field(min_length=1)
    consumed_at: UtcDatetime


class Profile(LedgerModel):
    """Owned by profile setup; rewards only read the referral linkage."""
    username: str = ""
    referral_code: str = ""
    referred_by: str | None = None  # referral code entered at sign-up
    created_at: UtcDatetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RewardLedger(LedgerModel):
    uid: str = Field(min_length=1)
    profile: Profile = Field(default_factory=Profile)
    mining: MiningLedger = Field(default_factory=MiningLedger)
    boost: BoostLedger = Field(default_factory=BoostLedger)
    daily_claim: DailyClaimLedger = Field(default_factory=DailyClaimLedger)
    watch_earn: WatchEarnLedger = Field(default_factory=WatchEarnLedger)
    referrals: ReferralLedger = Field(default_factory=ReferralLedger)
    ad_receipts: list[ConsumedReceipt] = Field(default_factory=list)


def generate_referral_code(uid: str) -> str:
    return uid[:6].upper()


def new_ledger(uid: str, referred_by: str | None = None, username: str = "") -> RewardLedger:
    return RewardLedger(
        uid=uid,
        profile=Profile(
            username=username,
            referral_code=generate_referral_code(uid),
            referred_by=referred_by,
        ),
    )
