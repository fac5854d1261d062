from fastapi import APIRouter, Depends

from vadmine.core.clock import Clock
from vadmine.deps import get_clock, get_current_uid, get_ledger_store
from vadmine.services import mining as mining_service
from vadmine.storage.base import LedgerStore

router = APIRouter()


@router.post("/start")
async def mining_start(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    """Start a mining session. No-op if one is already running."""
    await mining_service.start_mining(store, uid, clock)
    return {"status": "ok"}


@router.post("/stop")
async def mining_stop(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    """Stop mining without banking. Claim first to keep the accrued reward."""
    await mining_service.stop_mining(store, uid, clock)
    return {"status": "ok"}


@router.post("/claim")
async def mining_claim(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    reward = await mining_service.claim_mining(store, uid, clock)
    return {"reward": reward}
