import hashlib
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from vadmine.core.config import get_settings

SESSION_MAX_AGE = 7 * 24 * 3600  # 7 days


def get_session_serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt="vadmine-session",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_session_cookie(payload: dict[str, Any]) -> str:
    serializer = get_session_serializer()
    return serializer.dumps(payload)


def load_session_cookie(cookie_value: str) -> dict[str, Any] | None:
    serializer = get_session_serializer()
    try:
        return serializer.loads(cookie_value, max_age=SESSION_MAX_AGE)
    except (BadSignature, SignatureExpired):
        return None


def get_ad_receipt_serializer() -> URLSafeTimedSerializer:
    """Receipts are minted by the ad-mediation relay on a completed rewarded ad."""
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.ad_receipt_secret,
        salt="vadmine-ad-receipt",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_ad_receipt(uid: str, placement: str, nonce: str) -> str:
    return get_ad_receipt_serializer().dumps({"uid": uid, "placement": placement, "nonce": nonce})
