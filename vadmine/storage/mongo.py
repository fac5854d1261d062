from typing import Any

from beanie.exceptions import RevisionIdWasChanged
from pymongo.errors import DuplicateKeyError

from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger
from vadmine.models.reward_ledger import RewardLedgerDocument
from vadmine.storage.base import LedgerStore

log = get_logger(__name__)


class MongoLedgerStore(LedgerStore):
    """
    Optimistic concurrency on top of Beanie's revision tracking: the loaded
    document is the revision token, and replace() only matches while the stored
    revision_id is the one we read.
    """

    async def _read(self, uid: str) -> tuple[RewardLedger, Any] | None:
        doc = await RewardLedgerDocument.get(uid)
        if doc is None:
            return None
        return doc.to_ledger(), doc

    async def _commit(self, ledger: RewardLedger, token: Any) -> bool:
        doc: RewardLedgerDocument = token
        doc.apply(ledger)
        try:
            await doc.replace()
        except RevisionIdWasChanged:
            return False
        return True

    async def create(self, ledger: RewardLedger) -> tuple[RewardLedger, bool]:
        doc = RewardLedgerDocument.from_ledger(ledger)
        try:
            await doc.insert()
        except DuplicateKeyError:
            existing = await RewardLedgerDocument.get(ledger.uid)
            log.info("ledger_exists", uid=ledger.uid)
            return existing.to_ledger(), False
        log.info("ledger_created", uid=ledger.uid)
        return ledger, True

    async def find_uid_by_referral_code(self, code: str) -> str | None:
        doc = await RewardLedgerDocument.find_one(RewardLedgerDocument.profile.referral_code == code)
        return doc.id if doc else None
