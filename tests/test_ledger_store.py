"""Transactional read-modify-write semantics of the ledger store."""

import asyncio

import pytest

from vadmine.core.exceptions import TransactionConflictError
from vadmine.models.ledger import new_ledger
from vadmine.storage.base import LedgerUpdate
from vadmine.storage.memory import MemoryLedgerStore

from conftest import InterleavingStore

pytestmark = pytest.mark.asyncio


class AlwaysConflictingStore(MemoryLedgerStore):
    async def _commit(self, ledger, token):
        return False


def _add_watch(ledger):
    if ledger is None:
        return LedgerUpdate(None)
    ledger.watch_earn.total_watched += 1
    return LedgerUpdate(ledger.watch_earn.total_watched, ledger)


async def test_create_is_idempotent(store):
    first, created = await store.create(new_ledger("u1", username="first"))
    again, created_again = await store.create(new_ledger("u1", username="second"))
    assert created and not created_again
    assert again.profile.username == "first"


async def test_get_missing_returns_none(store):
    assert await store.get("nobody") is None


async def test_transact_on_missing_ledger_passes_none(store):
    seen = []

    def body(ledger):
        seen.append(ledger)
        return LedgerUpdate(0.0)

    assert await store.transact("nobody", body) == 0.0
    assert seen == [None]


async def test_transact_without_write_keeps_version(store):
    await store.create(new_ledger("u1"))
    await store.transact("u1", lambda ledger: LedgerUpdate("read-only"))
    assert store.version("u1") == 0


async def test_reads_are_isolated_copies(store):
    await store.create(new_ledger("u1"))
    ledger = await store.get("u1")
    ledger.watch_earn.total_watched = 10
    assert (await store.get("u1")).watch_earn.total_watched == 0


async def test_conflicting_transactions_are_retried():
    store = InterleavingStore(max_retries=5)
    await store.create(new_ledger("u1"))
    results = await asyncio.gather(*(store.transact("u1", _add_watch) for _ in range(3)))
    assert sorted(results) == [1, 2, 3]
    assert (await store.get("u1")).watch_earn.total_watched == 3
    assert store.version("u1") == 3


async def test_retries_exhausted_raise_conflict():
    store = AlwaysConflictingStore(max_retries=3)
    await store.create(new_ledger("u1"))
    with pytest.raises(TransactionConflictError) as exc:
        await store.transact("u1", _add_watch)
    assert exc.value.attempts == 3
    assert exc.value.status_code == 409
    assert (await store.get("u1")).watch_earn.total_watched == 0


async def test_find_uid_by_referral_code(store):
    await store.create(new_ledger("abcdef999"))
    assert await store.find_uid_by_referral_code("ABCDEF") == "abcdef999"
    assert await store.find_uid_by_referral_code("NOPE00") is None


def test_explicit_retry_count_is_kept(monkeypatch):
    from vadmine.core import config

    monkeypatch.setattr(config.get_settings(), "ledger_txn_max_retries", 7)
    assert MemoryLedgerStore().max_retries == 7
    assert MemoryLedgerStore(max_retries=1).max_retries == 1
    with pytest.raises(ValueError):
        MemoryLedgerStore(max_retries=0)
