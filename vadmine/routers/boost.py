from fastapi import APIRouter, Depends, Header

from vadmine.core.clock import Clock
from vadmine.core.exceptions import LedgerMissingError
from vadmine.deps import get_clock, get_current_uid, get_ledger_store
from vadmine.services import boost as boost_service
from vadmine.services.ads import verify_ad_receipt
from vadmine.storage.base import LedgerStore

router = APIRouter()


def serialize_boost_status(status: boost_service.BoostStatus) -> dict:
    return {
        "used": status.used,
        "remaining": status.remaining,
        "resets_at": status.resets_at.isoformat() if status.resets_at else None,
    }


@router.get("/status")
async def boost_status(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    ledger = await store.get(uid)
    if ledger is None:
        raise LedgerMissingError(uid)
    return serialize_boost_status(boost_service.boost_status(ledger, clock.now()))


@router.post("/claim")
async def boost_claim(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
    x_ad_receipt: str | None = Header(None, alias="X-Ad-Receipt"),
):
    """Grant a boost after a completed rewarded ad. reward 0 means the window's limit is used up."""
    receipt = verify_ad_receipt(x_ad_receipt, uid, "boost")
    reward = await boost_service.claim_boost(store, uid, clock, receipt_nonce=receipt["nonce"])
    return {"reward": reward, "limit_reached": reward == 0}
