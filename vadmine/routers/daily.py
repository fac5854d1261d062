from fastapi import APIRouter, Depends, Header

from vadmine.core.clock import Clock
from vadmine.core.exceptions import LedgerMissingError
from vadmine.deps import get_clock, get_current_uid, get_ledger_store
from vadmine.services import daily as daily_service
from vadmine.services.ads import verify_ad_receipt
from vadmine.storage.base import LedgerStore

router = APIRouter()


def serialize_daily_status(status: daily_service.DailyStatus) -> dict:
    return {
        "streak": status.streak,
        "can_claim": status.can_claim,
        "cooldown_seconds": int(status.cooldown.total_seconds()),
        "next_reward": status.next_reward,
        "rewards": list(status.rewards),
    }


@router.get("/status")
async def daily_status(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
):
    """Streak, cooldown until the next check-in and the 7-day reward table."""
    ledger = await store.get(uid)
    if ledger is None:
        raise LedgerMissingError(uid)
    return serialize_daily_status(daily_service.daily_status(ledger, clock.now()))


@router.post("/claim")
async def daily_claim(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
    clock: Clock = Depends(get_clock),
    x_ad_receipt: str | None = Header(None, alias="X-Ad-Receipt"),
):
    receipt = verify_ad_receipt(x_ad_receipt, uid, "daily")
    reward = await daily_service.claim_daily(store, uid, clock, receipt_nonce=receipt["nonce"])
    return {"reward": reward, "already_claimed": reward == 0}
