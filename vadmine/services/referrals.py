"""Referral linkage: referrer counters and the display-only referral bonus."""

from vadmine.core.exceptions import LedgerMissingError
from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger
from vadmine.services.projector import referral_bonus
from vadmine.storage.base import LedgerStore, LedgerUpdate

log = get_logger(__name__)


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


async def register_referral(store: LedgerStore, referrer_code: str | None, new_uid: str) -> bool:
    """
    Credit the owner of referrer_code with one referred user. Unknown codes and
    self-referrals are ignored; registering the same new user twice is a no-op.
    """
    code = normalize_code(referrer_code)
    if not code:
        return False
    referrer_uid = await store.find_uid_by_referral_code(code)
    if referrer_uid is None or referrer_uid == new_uid:
        log.info("referral_ignored", code=code, new_uid=new_uid)
        return False

    def body(ledger: RewardLedger | None) -> LedgerUpdate[bool]:
        if ledger is None or new_uid in ledger.referrals.referred_users:
            return LedgerUpdate(False)
        ledger.referrals.referred_users = [*ledger.referrals.referred_users, new_uid]
        ledger.referrals.total_referred += 1
        return LedgerUpdate(True, ledger)

    registered = await store.transact(referrer_uid, body)
    if registered:
        log.info("referral_registered", referrer_uid=referrer_uid, new_uid=new_uid)
    return registered


async def load_referrer(store: LedgerStore, ledger: RewardLedger) -> RewardLedger | None:
    """The ledger of whoever referred this user, or None."""
    code = normalize_code(ledger.profile.referred_by)
    if not code:
        return None
    referrer_uid = await store.find_uid_by_referral_code(code)
    if referrer_uid is None or referrer_uid == ledger.uid:
        return None
    return await store.get(referrer_uid)


async def referral_stats(store: LedgerStore, uid: str) -> dict:
    ledger = await store.get(uid)
    if ledger is None:
        raise LedgerMissingError(uid)
    referrer = await load_referrer(store, ledger)
    return {
        "referral_code": ledger.profile.referral_code,
        "referred_by": ledger.profile.referred_by,
        "total_referred": ledger.referrals.total_referred,
        "referral_bonus": referral_bonus(referrer),
    }
