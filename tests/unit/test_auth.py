from __future__ import annotations

import jwt
import pytest

from match_chat.infrastructure.auth.claims import principal_from_claims
from match_chat.infrastructure.auth.hs256_verifier import HS256Verifier

SECRET = "unit-test-secret-with-enough-length-for-hs256"


def test_claims_sub():
    principal = principal_from_claims({"sub": "42", "roles": ["premium"]})

    assert principal.user_id == 42
    assert principal.roles == ["premium"]
    assert principal.principal_key == "user:42"


def test_claims_legacy_user_id():
    assert principal_from_claims({"userId": 7}).user_id == 7


@pytest.mark.parametrize("payload", [{}, {"sub": "abc"}])
def test_claims_rejects_bad_subject(payload):
    with pytest.raises(jwt.InvalidTokenError):
        principal_from_claims(payload)


@pytest.mark.asyncio
async def test_hs256_roundtrip():
    token = jwt.encode({"sub": "43"}, SECRET, algorithm="HS256")

    principal = await HS256Verifier(SECRET).verify(token)

    assert principal.user_id == 43


@pytest.mark.asyncio
async def test_hs256_wrong_secret():
    token = jwt.encode({"sub": "43"}, SECRET, algorithm="HS256")

    with pytest.raises(jwt.InvalidSignatureError):
        await HS256Verifier(SECRET + "-other").verify(token)
