from fastapi import APIRouter, Depends

from vadmine.core.clock import Clock
from vadmine.core.exceptions import LedgerMissingError
from vadmine.deps import get_clock, get_current_uid, get_ledger_store
from vadmine.routers.boost import serialize_boost_status
from vadmine.routers.daily import serialize_daily_status
from vadmine.services.projector import project
from vadmine.services.referrals import load_referrer
from vadmine.storage.base import LedgerStore

router = APIRouter()


@router.get("/me")
async def ledger_me(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    """Ledger snapshot plus projected live balance. live_balance is for display only."""
    ledger = await store.get(uid)
    if ledger is None:
        raise LedgerMissingError(uid)
    now = clock.now()
    view = project(ledger, now, await load_referrer(store, ledger))
    return {
        "ledger": ledger.model_dump(mode="json"),
        "server_time": now.isoformat(),
        "live_balance": view.live_balance,
        "pending_mining_reward": view.pending_mining_reward,
        "referral_bonus": view.referral_bonus,
        "boost": serialize_boost_status(view.boost),
        "daily": serialize_daily_status(view.daily),
    }
