from fastapi import APIRouter, Depends, Header

from vadmine.core.clock import Clock
from vadmine.deps import get_clock, get_current_uid, get_ledger_store
from vadmine.services import watch_earn as watch_earn_service
from vadmine.services.ads import verify_ad_receipt
from vadmine.storage.base import LedgerStore

router = APIRouter()


@router.post("/claim")
async def watch_earn_claim(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
    x_ad_receipt: str | None = Header(None, alias="X-Ad-Receipt"),
):
    """Flat reward per completed rewarded ad. A receipt pays out once."""
    receipt = verify_ad_receipt(x_ad_receipt, uid, "watch_earn")
    reward = await watch_earn_service.claim_watch_earn(store, uid, clock, receipt_nonce=receipt["nonce"])
    return {"reward": reward}
