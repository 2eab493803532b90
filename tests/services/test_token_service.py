from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from marketplace.services import token_service


def test_token_carries_subject_and_roles() -> None:
    token = token_service.create_access_token(sub="u-1", roles=["user", "admin"])
    claims = token_service.decode_access_token(token)
    assert claims["sub"] == "u-1"
    assert claims["roles"] == ["user", "admin"]
    assert claims["iss"] == claims["aud"] == "course-marketplace"


def test_default_role_is_user() -> None:
    claims = token_service.decode_access_token(
        token_service.create_access_token(sub="u-1")
    )
    assert claims["roles"] == ["user"]


def test_expired_token_rejected() -> None:
    token = token_service.create_access_token(sub="u-1", ttl=timedelta(seconds=-1))
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)


def test_unsigned_token_rejected() -> None:
    forged = jwt.encode(
        {"sub": "u-1", "iss": "course-marketplace", "aud": "course-marketplace"},
        key=None,
        algorithm="none",
    )
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(forged)
