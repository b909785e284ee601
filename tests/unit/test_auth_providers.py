"""Tests for authentication providers and the identity dependency."""

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from api.auth.dependencies import get_identity
from api.auth.identity import Identity
from api.auth.jwt import create_access_token, verify_token
from api.auth.providers import clear_provider_cache, get_provider
from api.auth.providers.base import AuthResult
from api.auth.providers.clerk import ClerkAuthProvider, extract_org_id
from api.auth.providers.local import LocalAuthProvider
from api.exceptions import AuthenticationError


class TestAuthResult:
    """Tests for AuthResult dataclass."""

    def test_valid_result_to_identity(self):
        result = AuthResult(valid=True, subject="user_1", org_id="org_1", provider="clerk")
        assert result.to_identity() == Identity(subject="user_1", org_id="org_1")

    def test_invalid_result_has_no_identity(self):
        result = AuthResult(valid=False, provider="local", error="Token expired")
        assert result.to_identity() is None
        assert result.error == "Token expired"


class TestJwt:
    def test_round_trip_claims(self):
        token = create_access_token("user_1", org_id="org_1")
        payload = verify_token(token)
        assert payload["sub"] == "user_1"
        assert payload["org_id"] == "org_1"

    def test_expired_token(self):
        token = create_access_token("user_1", expires_minutes=-1)
        assert verify_token(token) is None


class TestLocalAuthProvider:
    """Tests for LocalAuthProvider."""

    def test_name(self):
        assert LocalAuthProvider().name == "local"

    @pytest.mark.asyncio
    async def test_verify_token_valid(self):
        """LocalAuthProvider verifies a valid JWT and reads the org claim."""
        token = create_access_token("user_1", org_id="org_1")

        result = await LocalAuthProvider().verify_token(token)

        assert result.valid is True
        assert result.subject == "user_1"
        assert result.org_id == "org_1"
        assert result.raw_claims is not None

    @pytest.mark.asyncio
    async def test_token_without_org(self):
        result = await LocalAuthProvider().verify_token(create_access_token("user_1"))
        assert result.valid is True
        assert result.org_id is None

    @pytest.mark.asyncio
    async def test_verify_token_invalid(self):
        result = await LocalAuthProvider().verify_token("invalid-token")
        assert result.valid is False
        assert result.error is not None


class TestClerkProvider:
    """Tests for Clerk claim handling."""

    @pytest.mark.parametrize(
        "claims,expected",
        [
            ({"org_id": "org_1"}, "org_1"),
            ({"o": {"id": "org_2", "rol": "admin"}}, "org_2"),
            ({"o": "not-a-dict"}, None),
            ({}, None),
        ],
    )
    def test_extract_org_id(self, claims, expected):
        assert extract_org_id(claims) == expected

    def test_requires_jwks_url(self, monkeypatch):
        monkeypatch.delenv("CLERK_JWKS_URL", raising=False)
        with pytest.raises(RuntimeError):
            ClerkAuthProvider()

    @pytest.mark.asyncio
    async def test_token_without_kid(self):
        provider = ClerkAuthProvider(jwks_url="https://example.test/jwks.json")
        # Local HS256 tokens carry no kid header
        result = await provider.verify_token(create_access_token("user_1"))
        assert result.valid is False
        assert "kid" in result.error

    def test_find_key(self):
        jwks = {"keys": [{"kid": "a"}, {"kid": "b", "n": "x"}]}
        assert ClerkAuthProvider._find_key(jwks, "b") == {"kid": "b", "n": "x"}
        assert ClerkAuthProvider._find_key(jwks, "c") is None


class TestProviderFactory:
    def test_local_by_default(self, monkeypatch):
        monkeypatch.setenv("AUTH_PROVIDER", "local")
        clear_provider_cache()
        try:
            assert isinstance(get_provider(), LocalAuthProvider)
        finally:
            clear_provider_cache()

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setenv("AUTH_PROVIDER", "ldap")
        clear_provider_cache()
        try:
            with pytest.raises(ValueError):
                get_provider()
        finally:
            clear_provider_cache()


class TestGetIdentity:
    """Tests for the get_identity dependency."""

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        assert await get_identity(None) is None

    @pytest.mark.asyncio
    async def test_valid_token(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token("user_1", org_id="org_1")
        )
        assert await get_identity(credentials) == Identity("user_1", "org_1")

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="nope")
        with pytest.raises(AuthenticationError):
            await get_identity(credentials)
