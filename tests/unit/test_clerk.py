"""
Unit tests for Clerk session token verification.
"""

import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from shared.auth import get_current_user
from shared.auth.clerk import ClerkVerifier, set_clerk_verifier
from shared.config import settings


JWKS_URL = "https://clerk.metaworks.test/.well-known/jwks.json"


@pytest.fixture(scope="module")
def rsa_keys() -> tuple[bytes, dict]:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, algorithm="RS256").to_dict()
    public_jwk["kid"] = "ins_1"
    return private_pem, public_jwk


def session_token(private_pem: bytes, kid: str = "ins_1", **claims) -> str:
    now = int(time.time())
    payload = {"sub": "user_2abc", "iat": now, "exp": now + 300, **claims}
    return jwt.encode(payload, private_pem, algorithm="RS256", headers={"kid": kid})


class JWKSServer:
    """MockTransport handler serving a fixed key set and counting fetches."""

    def __init__(self, keys: list[dict], status_code: int = 200) -> None:
        self.keys = keys
        self.status_code = status_code
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        return httpx.Response(self.status_code, json={"keys": self.keys})


def verifier_for(server: JWKSServer) -> ClerkVerifier:
    return ClerkVerifier(jwks_url=JWKS_URL, issuer="", cache_seconds=3600, transport=httpx.MockTransport(server))


class TestClerkVerifier:
    async def test_valid_token(self, rsa_keys) -> None:
        private_pem, public_jwk = rsa_keys
        verifier = verifier_for(JWKSServer([public_jwk]))

        token_data = await verifier.verify(
            session_token(private_pem, email="ciso@acme.sa", public_metadata={"role": "admin"})
        )

        assert token_data is not None
        assert token_data.sub == "user_2abc"
        assert token_data.token_type == "clerk"
        assert token_data.roles == ["admin"]
        assert token_data.username == "ciso@acme.sa"

    async def test_default_role_is_user(self, rsa_keys) -> None:
        private_pem, public_jwk = rsa_keys
        verifier = verifier_for(JWKSServer([public_jwk]))

        token_data = await verifier.verify(session_token(private_pem))

        assert token_data.roles == ["user"]

    async def test_keys_are_cached(self, rsa_keys) -> None:
        private_pem, public_jwk = rsa_keys
        server = JWKSServer([public_jwk])
        verifier = verifier_for(server)

        await verifier.verify(session_token(private_pem))
        await verifier.verify(session_token(private_pem))

        assert server.requests == 1

    async def test_unknown_kid_refetches_once(self, rsa_keys) -> None:
        private_pem, public_jwk = rsa_keys
        server = JWKSServer([public_jwk])
        verifier = verifier_for(server)

        assert await verifier.verify(session_token(private_pem, kid="rotated")) is None
        assert server.requests == 2

    async def test_hs256_token_rejected(self, rsa_keys) -> None:
        _, public_jwk = rsa_keys
        server = JWKSServer([public_jwk])
        token = jwt.encode({"sub": "user_2abc"}, "shared-secret", algorithm="HS256")

        assert await verifier_for(server).verify(token) is None
        assert server.requests == 0

    async def test_expired_token_rejected(self, rsa_keys) -> None:
        private_pem, public_jwk = rsa_keys
        token = session_token(private_pem, exp=int(time.time()) - 60)

        assert await verifier_for(JWKSServer([public_jwk])).verify(token) is None

    async def test_jwks_outage(self, rsa_keys) -> None:
        private_pem, _ = rsa_keys
        verifier = verifier_for(JWKSServer([], status_code=503))

        assert await verifier.verify(session_token(private_pem)) is None

    async def test_disabled_without_jwks_url(self, rsa_keys) -> None:
        private_pem, _ = rsa_keys

        assert await ClerkVerifier(jwks_url="").verify(session_token(private_pem)) is None


class TestClerkDependency:
    async def test_clerk_session_becomes_user(self, rsa_keys, monkeypatch: pytest.MonkeyPatch) -> None:
        private_pem, public_jwk = rsa_keys
        monkeypatch.setattr(settings.clerk, "jwks_url", JWKS_URL)
        monkeypatch.setattr("shared.auth.clerk._verifier", None)
        set_clerk_verifier(verifier_for(JWKSServer([public_jwk])))

        user = await get_current_user(session_token(private_pem))

        assert user.id == "user_2abc"
        assert user.auth_provider == "clerk"
        assert user.is_admin is False
