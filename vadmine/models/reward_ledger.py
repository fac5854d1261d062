from datetime import datetime, timezone

from beanie import Document
from pydantic import Field

from vadmine.models.ledger import (
    BoostLedger,
    ConsumedReceipt,
    DailyClaimLedger,
    MiningLedger,
    Profile,
    ReferralLedger,
    RewardLedger,
    WatchEarnLedger,
)


class RewardLedgerDocument(Document):
    """One ledger per user, keyed by the identity provider's uid."""
    id: str  # Firebase uid
    profile: Profile = Field(default_factory=Profile)
    mining: MiningLedger = Field(default_factory=MiningLedger)
    boost: BoostLedger = Field(default_factory=BoostLedger)
    daily_claim: DailyClaimLedger = Field(default_factory=DailyClaimLedger)
    watch_earn: WatchEarnLedger = Field(default_factory=WatchEarnLedger)
    referrals: ReferralLedger = Field(default_factory=ReferralLedger)
    ad_receipts: list[ConsumedReceipt] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "reward_ledgers"
        use_revision = True
        indexes = [[("profile.referral_code", 1)]]

    def to_ledger(self) -> RewardLedger:
        data = self.model_dump(
            include={"profile", "mining", "boost", "daily_claim", "watch_earn", "referrals", "ad_receipts"}
        )
        return RewardLedger.model_validate({"uid": self.id, **data})

    def apply(self, ledger: RewardLedger) -> None:
        """Copy a computed ledger onto this (revision-tracked) document."""
        self.profile = ledger.profile
        self.mining = ledger.mining
        self.boost = ledger.boost
        self.daily_claim = ledger.daily_claim
        self.watch_earn = ledger.watch_earn
        self.referrals = ledger.referrals
        self.ad_receipts = ledger.ad_receipts
        self.updated_at = datetime.now(timezone.utc)

    @classmethod
    def from_ledger(cls, ledger: RewardLedger) -> "RewardLedgerDocument":
        doc = cls(id=ledger.uid)
        doc.apply(ledger)
        return doc
