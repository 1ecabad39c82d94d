from datetime import timedelta

import jwt
import pytest

from app.core.config import settings
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.errors import AuthenticationError
from app.utils.time import utc_now


pytestmark = pytest.mark.unit


def test_password_hash_round_trip():
    hashed = hash_password("segredo1")
    assert hashed != "segredo1"
    assert verify_password("segredo1", hashed)
    assert not verify_password("outra", hashed)


def test_token_carries_user_and_role():
    token = create_access_token({"user_id": "abc", "role": "Recrutador"})
    payload = decode_access_token(token)
    assert payload["user_id"] == "abc"
    assert payload["role"] == "Recrutador"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = jwt.encode(
        {"user_id": "abc", "exp": utc_now() - timedelta(minutes=1)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(AuthenticationError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"user_id": "abc"}, "another-secret-key-of-sufficient-length", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_access_token(token)
