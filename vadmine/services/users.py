"""Identity boundary: Firebase ID tokens in, a stable uid and a provisioned ledger out."""

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from vadmine.core.config import get_settings
from vadmine.core.exceptions import BadRequestError, NotAuthenticatedError
from vadmine.core.logging import get_logger
from vadmine.models.ledger import RewardLedger, new_ledger
from vadmine.services.referrals import normalize_code, register_referral
from vadmine.storage.base import LedgerStore

log = get_logger(__name__)


def verify_firebase_id_token(token: str) -> dict:
    """Verify a Firebase Auth ID token; return decoded claims (sub is the uid)."""
    settings = get_settings()
    try:
        return id_token.verify_firebase_token(
            token,
            google_requests.Request(),
            audience=settings.firebase_project_id or None,
        )
    except Exception as e:
        raise NotAuthenticatedError(f"Invalid Firebase token: {e}") from e


def uid_from_claims(claims: dict) -> str:
    uid = claims.get("sub") or claims.get("user_id")
    if not uid:
        raise BadRequestError("Missing sub in token")
    return uid


async def provision_user(
    store: LedgerStore,
    uid: str,
    referral_code: str | None = None,
    username: str = "",
) -> RewardLedger:
    """Create the user's ledger on first sign-in. Later sign-ins return it unchanged."""
    code = normalize_code(referral_code) or None
    ledger, created = await store.create(new_ledger(uid, referred_by=code, username=username))
    if not created:
        return ledger
    log.info("user_provisioned", uid=uid, referred_by=code)
    if code:
        await register_referral(store, code, uid)
    return ledger


def session_payload_for_uid(uid: str) -> dict:
    return {"uid": uid}
