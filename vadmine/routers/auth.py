from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from vadmine.core.security import SESSION_MAX_AGE, create_session_cookie
from vadmine.deps import SESSION_COOKIE_NAME, get_current_uid, get_ledger_store
from vadmine.services import users as user_service
from vadmine.storage.base import LedgerStore

router = APIRouter()


class FirebaseAuthRequest(BaseModel):
    id_token: str
    referral_code: str | None = None
    username: str = ""


@router.post("/firebase")
async def auth_firebase(
    body: FirebaseAuthRequest,
    response: Response,
    store: LedgerStore = Depends(get_ledger_store),
):
    """Exchange a Firebase ID token for a session; provision the ledger on first sign-in."""
    claims = user_service.verify_firebase_id_token(body.id_token)
    uid = user_service.uid_from_claims(claims)
    ledger = await user_service.provision_user(store, uid, body.referral_code, body.username)
    session_value = create_session_cookie(user_service.session_payload_for_uid(uid))
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_value,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=False,  # set True in prod with HTTPS
        samesite="lax",
        path="/",
    )
    return {"uid": uid, "referral_code": ledger.profile.referral_code}


@router.get("/me")
async def auth_me(uid: str = Depends(get_current_uid)):
    """Return current uid. Requires session cookie."""
    return {"uid": uid}


@router.post("/logout")
async def auth_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"status": "ok"}
