import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# In-process ledgers; no MongoDB needed
os.environ.setdefault("LEDGER_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("AD_RECEIPT_SECRET", "test-ad-relay-secret")
os.environ.setdefault("MONGODB_DB_NAME", "vadmine_test")

from vadmine.storage.memory import MemoryLedgerStore  # noqa: E402

T0 = datetime(2026, 3, 2, 8, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class InterleavingStore(MemoryLedgerStore):
    """Yields to the loop after every read so concurrent transactions overlap."""

    async def _read(self, uid):
        found = await super()._read(uid)
        await asyncio.sleep(0)
        return found


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryLedgerStore:
    return MemoryLedgerStore(max_retries=5)


@pytest_asyncio.fixture
async def ledger(store):
    """A provisioned ledger for uid 'alice-uid'."""
    from vadmine.services.users import provision_user
    return await provision_user(store, "alice-uid")


def session_headers(uid: str) -> dict[str, str]:
    from vadmine.core.security import create_session_cookie
    from vadmine.deps import SESSION_COOKIE_NAME
    return {"Cookie": f"{SESSION_COOKIE_NAME}={create_session_cookie({'uid': uid})}"}


def ad_headers(uid: str, placement: str, nonce: str = "n-1") -> dict[str, str]:
    from vadmine.core.security import create_ad_receipt
    return {**session_headers(uid), "X-Ad-Receipt": create_ad_receipt(uid, placement, nonce)}


@pytest_asyncio.fixture
async def client(store, clock) -> AsyncGenerator[AsyncClient, None]:
    from vadmine.deps import get_clock, get_ledger_store
    from vadmine.main import app
    app.dependency_overrides[get_ledger_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
