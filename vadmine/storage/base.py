"""Ledger store boundary: keyed get, idempotent create, transactional read-modify-write."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from vadmine.core.config import get_settings
from vadmine.core.exceptions import TransactionConflictError
from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger

log = get_logger(__name__)

T = TypeVar("T")


@dataclass
class LedgerUpdate(Generic[T]):
    """Outcome of a transaction body: the value to return and, if it changed, the ledger to write."""
    result: T
    ledger: RewardLedger | None = None


TransactionBody = Callable[[RewardLedger | None], LedgerUpdate[T]]


class LedgerStore(ABC):
    """
    Subclasses provide a versioned read and a compare-and-set commit; `transact`
    turns those into an all-or-nothing read-modify-write that is retried on
    conflict. The body must be pure: it may run several times.
    """

    def __init__(self, max_retries: int | None = None) -> None:
        if max_retries is None:
            max_retries = get_settings().ledger_txn_max_retries
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.max_retries = max_retries

    @abstractmethod
    async def _read(self, uid: str) -> tuple[RewardLedger, Any] | None:
        """Return (ledger, revision token) or None if the document is missing."""
        ...

    @abstractmethod
    async def _commit(self, ledger: RewardLedger, token: Any) -> bool:
        """Write ledger if the stored revision still equals token. False on conflict."""
        ...

    @abstractmethod
    async def create(self, ledger: RewardLedger) -> tuple[RewardLedger, bool]:
        """Insert a new ledger; if one already exists return it untouched. The flag is True when inserted."""
        ...

    @abstractmethod
    async def find_uid_by_referral_code(self, code: str) -> str | None:
        ...

    async def get(self, uid: str) -> RewardLedger | None:
        found = await self._read(uid)
        return found[0] if found else None

    async def transact(self, uid: str, body: TransactionBody[T]) -> T:
        for attempt in range(1, self.max_retries + 1):
            found = await self._read(uid)
            if found is None:
                return body(None).result
            ledger, token = found
            update = body(ledger)
            if update.ledger is None:
                return update.result
            # Re-validate the whole document before it leaves the process.
            checked = RewardLedger.model_validate(update.ledger.model_dump())
            if await self._commit(checked, token):
                return update.result
            log.info("ledger_txn_conflict", uid=uid, attempt=attempt)
        log.warning("ledger_txn_exhausted", uid=uid, attempts=self.max_retries)
        raise TransactionConflictError(uid, self.max_retries)


def build_ledger_store() -> LedgerStore:
    settings = get_settings()
    if settings.ledger_backend == "memory":
        from vadmine.storage.memory import MemoryLedgerStore
        return MemoryLedgerStore()
    from vadmine.storage.mongo import MongoLedgerStore
    return MongoLedgerStore()
