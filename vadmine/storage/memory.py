from typing import Any

from vadmine.models.ledger import RewardLedger
from vadmine.storage.base import LedgerStore


class MemoryLedgerStore(LedgerStore):
    """Process-local ledgers for development and tests. Each uid maps to (version, dumped ledger)."""

    def __init__(self, max_retries: int | None = None) -> None:
        super().__init__(max_retries)
        self._docs: dict[str, tuple[int, dict[str, Any]]] = {}

    async def _read(self, uid: str) -> tuple[RewardLedger, Any] | None:
        entry = self._docs.get(uid)
        if entry is None:
            return None
        version, data = entry
        return RewardLedger.model_validate(data), version

    async def _commit(self, ledger: RewardLedger, token: Any) -> bool:
        entry = self._docs.get(ledger.uid)
        if entry is None or entry[0] != token:
            return False
        self._docs[ledger.uid] = (token + 1, ledger.model_dump())
        return True

    async def create(self, ledger: RewardLedger) -> tuple[RewardLedger, bool]:
        entry = self._docs.get(ledger.uid)
        if entry is not None:
            return RewardLedger.model_validate(entry[1]), False
        self._docs[ledger.uid] = (0, ledger.model_dump())
        return ledger, True

    async def find_uid_by_referral_code(self, code: str) -> str | None:
        for uid, (_, data) in self._docs.items():
            if data["profile"]["referral_code"] == code:
                return uid
        return None

    def version(self, uid: str) -> int | None:
        entry = self._docs.get(uid)
        return entry[0] if entry else None
