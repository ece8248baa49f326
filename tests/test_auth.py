import asyncio
import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from auth.utils import FirebaseTokenVerifier
from errors import Unauthorized

PROJECT_ID = "plantora-test"


@pytest.fixture(scope="module")
def signing_key():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = jwk.construct(public_pem, algorithm="RS256").to_dict()
    public_jwk["kid"] = "key-1"
    return private_pem, public_jwk


def make_token(private_pem, kid="key-1", **overrides):
    now = int(time.time())
    claims = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "sub": "firebase-uid-1",
        "email": "buyer@example.com",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


def verify(token, public_jwk, project_id=PROJECT_ID, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        return httpx.Response(200, json={"keys": [public_jwk]})

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await FirebaseTokenVerifier(project_id, http).verify(token)

    return asyncio.run(_run())


def test_valid_token_yields_email(signing_key):
    private_pem, public_jwk = signing_key
    assert verify(make_token(private_pem), public_jwk) == "buyer@example.com"


def test_expired_token(signing_key):
    private_pem, public_jwk = signing_key
    token = make_token(private_pem, iat=int(time.time()) - 7200, exp=int(time.time()) - 3600)
    with pytest.raises(Unauthorized):
        verify(token, public_jwk)


def test_token_for_another_project(signing_key):
    private_pem, public_jwk = signing_key
    token = make_token(private_pem, aud="someone-else")
    with pytest.raises(Unauthorized):
        verify(token, public_jwk)


def test_token_without_email(signing_key):
    private_pem, public_jwk = signing_key
    token = make_token(private_pem, email=None)
    with pytest.raises(Unauthorized):
        verify(token, public_jwk)


def test_unknown_key_id_refreshes_once(signing_key):
    private_pem, public_jwk = signing_key
    calls = []
    with pytest.raises(Unauthorized):
        verify(make_token(private_pem, kid="rotated"), public_jwk, calls=calls)
    assert len(calls) == 2


def test_garbage_token(signing_key):
    _, public_jwk = signing_key
    with pytest.raises(Unauthorized):
        verify("not-a-jwt", public_jwk)


def test_missing_project_id(signing_key):
    private_pem, public_jwk = signing_key
    with pytest.raises(Unauthorized):
        verify(make_token(private_pem), public_jwk, project_id=None)


def test_token_issued_in_the_future(signing_key):
    private_pem, public_jwk = signing_key
    later = int(time.time()) + 3600
    token = make_token(private_pem, iat=later, exp=later + 3600)
    with pytest.raises(Unauthorized):
        verify(token, public_jwk)


def test_auth_time_in_the_future(signing_key):
    private_pem, public_jwk = signing_key
    token = make_token(private_pem, auth_time=int(time.time()) + 3600)
    with pytest.raises(Unauthorized):
        verify(token, public_jwk)


def test_small_clock_skew_is_tolerated(signing_key):
    private_pem, public_jwk = signing_key
    token = make_token(private_pem, auth_time=int(time.time()) + 5)
    assert verify(token, public_jwk) == "buyer@example.com"
