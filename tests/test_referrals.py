import pytest

from vadmine.core.exceptions import LedgerMissingError
from vadmine.services import referrals
from vadmine.services.users import provision_user, uid_from_claims


async def test_provision_creates_ledger_once(store):
    first = await provision_user(store, "carol123uid", username="carol")
    assert first.profile.referral_code == "CAROL1"
    again = await provision_user(store, "carol123uid", username="someone else")
    assert again.profile.username == "carol"


async def test_signup_with_referral_code_credits_referrer(store):
    await provision_user(store, "alice-uid")
    await provision_user(store, "bob-uid", referral_code=" alice- ")
    referrer = await store.get("alice-uid")
    assert referrer.referrals.total_referred == 1
    assert referrer.referrals.referred_users == ["bob-uid"]
    assert (await store.get("bob-uid")).profile.referred_by == "ALICE-"


async def test_second_signin_does_not_double_count(store):
    await provision_user(store, "alice-uid")
    await provision_user(store, "bob-uid", referral_code="ALICE-")
    await provision_user(store, "bob-uid", referral_code="ALICE-")
    assert await referrals.register_referral(store, "ALICE-", "bob-uid") is False
    assert (await store.get("alice-uid")).referrals.total_referred == 1


async def test_unknown_and_self_referrals_ignored(store):
    await provision_user(store, "alice-uid")
    assert await referrals.register_referral(store, "NOBODY", "bob-uid") is False
    assert await referrals.register_referral(store, "ALICE-", "alice-uid") is False
    assert await referrals.register_referral(store, None, "bob-uid") is False
    assert (await store.get("alice-uid")).referrals.total_referred == 0


async def test_referral_stats(store):
    await provision_user(store, "alice-uid")
    for uid in ("bob-uid", "dan-uid", "eve-uid"):
        await provision_user(store, uid, referral_code="ALICE-")
    stats = await referrals.referral_stats(store, "alice-uid")
    assert stats["referral_code"] == "ALICE-"
    assert stats["total_referred"] == 3
    assert stats["referral_bonus"] == 0.0

    # a referred user sees a bonus scaled by their referrer's count
    stats = await referrals.referral_stats(store, "bob-uid")
    assert stats["referred_by"] == "ALICE-"
    assert stats["total_referred"] == 0
    assert stats["referral_bonus"] == pytest.approx(0.3)


async def test_load_referrer(store):
    alice = await provision_user(store, "alice-uid")
    bob = await provision_user(store, "bob-uid", referral_code="alice-")
    stray = await provision_user(store, "carl-uid", referral_code="NOBODY")
    assert await referrals.load_referrer(store, alice) is None
    assert (await referrals.load_referrer(store, bob)).uid == "alice-uid"
    assert await referrals.load_referrer(store, stray) is None


async def test_referral_stats_missing_ledger(store):
    with pytest.raises(LedgerMissingError):
        await referrals.referral_stats(store, "ghost")


def test_uid_from_claims():
    assert uid_from_claims({"sub": "abc", "user_id": "abc"}) == "abc"
    assert uid_from_claims({"user_id": "xyz"}) == "xyz"
