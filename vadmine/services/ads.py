"""Rewarded-ad completion boundary. A reward call fires only after the ad resolved."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Literal

from itsdangerous import BadSignature, SignatureExpired

from vadmine.core.config import get_settings
from vadmine.core.exceptions import AdNotCompletedError
from vadmine.core.logging import get_logger
from vadmine.core.security import get_ad_receipt_serializer
from vadmine.models.ledger import ConsumedReceipt, RewardLedger

log = get_logger(__name__)

Placement = Literal["boost", "daily", "watch_earn"]


async def await_ad_signal(signal: Awaitable[Any], timeout: float | None = None) -> None:
    """Wait for the ad SDK's completion signal. Failure, skip and timeout all mean "not completed"."""
    if timeout is None:
        timeout = get_settings().ad_signal_timeout_seconds
    try:
        await asyncio.wait_for(signal, timeout=timeout)
    except asyncio.TimeoutError as e:
        log.info("ad_signal_timeout", timeout=timeout)
        raise AdNotCompletedError("Ad did not finish in time", reason="timeout") from e
    except AdNotCompletedError:
        raise
    except Exception as e:
        log.info("ad_signal_failed", error=str(e))
        raise AdNotCompletedError(reason="failed") from e


async def claim_after_ad(
    signal: Awaitable[Any],
    claim: Callable[[], Awaitable[float]],
    timeout: float | None = None,
) -> float:
    await await_ad_signal(signal, timeout)
    return await claim()


def verify_ad_receipt(receipt: str | None, uid: str, placement: Placement) -> dict[str, Any]:
    """Check a relay-signed receipt for this uid and placement; raise AdNotCompletedError otherwise."""
    if not receipt:
        raise AdNotCompletedError("Ad receipt required", reason="missing")
    settings = get_settings()
    try:
        payload = get_ad_receipt_serializer().loads(receipt, max_age=settings.ad_receipt_max_age_seconds)
    except SignatureExpired as e:
        raise AdNotCompletedError("Ad receipt expired", reason="expired") from e
    except BadSignature as e:
        raise AdNotCompletedError("Ad receipt invalid", reason="invalid") from e
    if not isinstance(payload, dict) or payload.get("uid") != uid or payload.get("placement") != placement:
        log.warning("ad_receipt_mismatch", uid=uid, placement=placement)
        raise AdNotCompletedError("Ad receipt does not match", reason="mismatch")
    nonce = payload.get("nonce")
    if not isinstance(nonce, str) or not nonce:
        raise AdNotCompletedError("Ad receipt invalid", reason="invalid")
    return payload


def ensure_receipt_unused(ledger: RewardLedger, placement: Placement, nonce: str | None) -> None:
    """Raise if this receipt already paid out. Call inside the ledger transaction."""
    if nonce is None:
        return
    if any(r.placement == placement and r.nonce == nonce for r in ledger.ad_receipts):
        log.warning("ad_receipt_replayed", uid=ledger.uid, placement=placement)
        raise AdNotCompletedError("Ad receipt already used", reason="replayed")


def record_receipt(ledger: RewardLedger, placement: Placement, nonce: str | None, now: datetime) -> None:
    """Remember a paid-out receipt; entries older than the receipt max age are dropped."""
    if nonce is None:
        return
    cutoff = now - timedelta(seconds=get_settings().ad_receipt_max_age_seconds)
    kept = [r for r in ledger.ad_receipts if r.consumed_at >= cutoff]
    ledger.ad_receipts = [*kept, ConsumedReceipt(placement=placement, nonce=nonce, consumed_at=now)]
