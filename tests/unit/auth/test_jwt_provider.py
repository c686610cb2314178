"""Unit tests for JWTAuthProvider."""

from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jose import jwt
from jose.backends import ECKey

from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider

SECRET = "test-secret"
JWKS_URL = "https://example.supabase.co/auth/v1/.well-known/jwks.json"


def _make_hs256_token(payload: dict[str, Any], secret: str = SECRET) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key=SECRET, algorithm="HS256", expire_minutes=30, jwks_url="")


@pytest.fixture(scope="module")
def ec_private_pem() -> str:
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="module")
def ec_public_jwk(ec_private_pem: str) -> dict[str, Any]:
    jwk = ECKey(ec_private_pem, algorithm="ES256").public_key().to_dict()
    jwk["kid"] = "key-1"
    return jwk


def _jwks_client(keys: list[dict[str, Any]], calls: list[str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json={"keys": keys})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# HS256
# ---------------------------------------------------------------------------


class TestValidateHS256:
    async def test_round_trips_identity(self, hs256_provider: JWTAuthProvider):
        identity = Identity(
            id=uuid4(),
            email="ada@uni.edu",
            full_name="Ada Lovelace",
            avatar_url="https://cdn.example/ada.png",
        )
        token = hs256_provider.create_token(identity)

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.id == identity.id
        assert result.email == "ada@uni.edu"
        assert result.full_name == "Ada Lovelace"
        assert result.avatar_url == "https://cdn.example/ada.png"
        assert result.provider_role == "authenticated"

    async def test_email_is_optional(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": str(uuid4()), "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.email == ""

    async def test_name_falls_back_to_other_metadata_keys(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token(
            {"sub": str(uuid4()), "user_metadata": {"name": "Grace"}, "exp": 9999999999}
        )

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.full_name == "Grace"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "user@example.com", "exp": 9999999999},
            {"sub": "", "email": "user@example.com", "exp": 9999999999},
            {"sub": "not-a-uuid", "exp": 9999999999},
        ],
    )
    async def test_bad_subject_yields_none(self, hs256_provider: JWTAuthProvider, payload):
        assert await hs256_provider.validate_token(_make_hs256_token(payload)) is None

    async def test_expired_token_yields_none(self, hs256_provider: JWTAuthProvider):
        expired = datetime.utcnow() - timedelta(minutes=5)
        token = _make_hs256_token({"sub": str(uuid4()), "exp": expired})

        assert await hs256_provider.validate_token(token) is None

    async def test_wrong_secret_yields_none(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token({"sub": str(uuid4()), "exp": 9999999999}, secret="other")

        assert await hs256_provider.validate_token(token) is None

    async def test_garbage_yields_none(self, hs256_provider: JWTAuthProvider):
        assert await hs256_provider.validate_token("invalid.jwt.token") is None


# ---------------------------------------------------------------------------
# ES256 via JWKS
# ---------------------------------------------------------------------------


class TestValidateES256:
    async def test_validates_with_jwks_and_caches_keys(
        self, ec_private_pem: str, ec_public_jwk: dict[str, Any]
    ):
        calls: list[str] = []
        provider = JWTAuthProvider(
            secret_key=SECRET, jwks_url=JWKS_URL, http_client=_jwks_client([ec_public_jwk], calls)
        )
        user_id = uuid4()
        token = jwt.encode(
            {"sub": str(user_id), "email": "a@b.c", "exp": 9999999999},
            ec_private_pem,
            algorithm="ES256",
            headers={"kid": "key-1"},
        )

        first = await provider.validate_token(token)
        second = await provider.validate_token(token)

        assert first is not None and first.id == user_id
        assert second is not None
        assert calls == [JWKS_URL]

    async def test_unknown_kid_refetches_once(
        self, ec_private_pem: str, ec_public_jwk: dict[str, Any]
    ):
        calls: list[str] = []
        provider = JWTAuthProvider(
            secret_key=SECRET, jwks_url=JWKS_URL, http_client=_jwks_client([ec_public_jwk], calls)
        )
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999},
            ec_private_pem,
            algorithm="ES256",
            headers={"kid": "rotated-away"},
        )

        assert await provider.validate_token(token) is None
        assert len(calls) == 2

    async def test_caches_are_per_instance(self, ec_public_jwk: dict[str, Any]):
        calls: list[str] = []
        client = _jwks_client([ec_public_jwk], calls)
        first = JWTAuthProvider(jwks_url=JWKS_URL, http_client=client)
        second = JWTAuthProvider(jwks_url=JWKS_URL, http_client=client)

        await first._get_jwks_keys()
        await second._get_jwks_keys()

        assert len(calls) == 2

    async def test_jwks_failure_yields_empty_keys(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        provider = JWTAuthProvider(
            jwks_url=JWKS_URL,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        assert await provider._get_jwks_keys() == {}

    async def test_no_jwks_url(self):
        provider = JWTAuthProvider(jwks_url="")

        assert await provider._get_jwks_keys() == {}
