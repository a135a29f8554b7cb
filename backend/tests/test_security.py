"""
Tests for password hashing, tokens and the authorization predicate.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from elearning.core.config import settings
from elearning.core.exceptions import AuthorizationError
from elearning.core.security import (
    authorize,
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token
)


def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_token_carries_subject_and_claims():
    token = create_access_token(
        subject="42",
        additional_claims={"email": "someone@example.com", "role": "instructor"}
    )

    payload = verify_token(token)

    assert payload["sub"] == "42"
    assert payload["email"] == "someone@example.com"
    assert payload["role"] == "instructor"
    assert payload["exp"] > payload["iat"]


def test_expired_token_is_rejected():
    token = create_access_token(subject="1", expires_delta=timedelta(seconds=-5))

    assert verify_token(token) is None


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": "1"}, "not-the-secret", algorithm=settings.ALGORITHM)

    assert verify_token(token) is None


def test_garbage_token_is_rejected():
    assert verify_token("not.a.token") is None


def actor(user_id, role):
    return SimpleNamespace(id=user_id, role=role)


def test_authorize_accepts_matching_role():
    authorize(actor(1, "instructor"), roles=["instructor", "admin"])


def test_authorize_rejects_other_roles():
    with pytest.raises(AuthorizationError):
        authorize(actor(1, "student"), roles=["instructor", "admin"])


def test_authorize_owner_passes_and_stranger_fails():
    authorize(actor(7, "instructor"), owner_id=7)

    with pytest.raises(AuthorizationError) as excinfo:
        authorize(actor(8, "instructor"), owner_id=7, message="Not yours")
    assert excinfo.value.message == "Not yours"
    assert excinfo.value.status_code == 403


def test_authorize_admin_always_passes_ownership():
    authorize(actor(99, "admin"), roles=["instructor", "admin"], owner_id=7)
