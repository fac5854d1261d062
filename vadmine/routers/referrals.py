from fastapi import APIRouter, Depends

from vadmine.deps import get_current_uid, get_ledger_store
from vadmine.services import referrals as referrals_service
from vadmine.storage.base import LedgerStore

router = APIRouter()


@router.get("/me")
async def referral_me(
    uid: str = Depends(get_current_uid),
    store: LedgerStore = Depends(get_ledger_store),
):
    """Referral code, referred count and the display-only referral bonus."""
    return await referrals_service.referral_stats(store, uid)
