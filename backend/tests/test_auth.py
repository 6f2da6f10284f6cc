"""Tests for token minting, identity extraction, passwords and the gateway exchange."""

import time
from uuid import uuid4

import httpx
import jwt
import pytest

from matchup.auth import (
    AUTH_PRINCIPAL,
    Credential,
    GatewayClient,
    JWTService,
    PasswordService,
    extract_identity,
)
from matchup.core.errors import GatewayFailure, IdentityFailure


@pytest.fixture
def credential():
    return Credential(key="K", secret="S")


@pytest.fixture
def jwt_service(credential):
    return JWTService(credential)


# =============================================================================
# JWT
# =============================================================================


class TestJWTService:
    def test_token_carries_issuer_and_id(self, jwt_service):
        auth_id = uuid4()
        token = jwt_service.create_token(auth_id)

        claims = jwt.decode(token, "S", algorithms=["HS256"])

        assert claims["iss"] == "K"
        assert claims["id"] == str(auth_id)

    def test_token_expires_in_a_day(self, jwt_service):
        before = int(time.time())
        token = jwt_service.create_token(uuid4())
        claims = jwt.decode(token, "S", algorithms=["HS256"], issuer="K")
        assert before + 24 * 3600 <= claims["exp"] <= int(time.time()) + 24 * 3600

    def test_secret_not_in_repr(self, credential):
        assert repr(credential) == "Credential(key='K', secret='***')"


class TestExtractIdentity:
    def test_bearer_token(self, jwt_service):
        auth_id = uuid4()
        identity = extract_identity(f"Bearer {jwt_service.create_token(auth_id)}")
        assert identity.auth_id == auth_id

    def test_signature_not_checked(self):
        auth_id = uuid4()
        token = jwt.encode({"id": str(auth_id)}, "whatever", algorithm="HS256")
        assert extract_identity(f"Bearer {token}").auth_id == auth_id

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        with pytest.raises(IdentityFailure, match="Authorization header not provided"):
            extract_identity(header)

    def test_garbage_token(self):
        with pytest.raises(IdentityFailure, match="Could not authorize request"):
            extract_identity("Bearer not-a-jwt")

    def test_missing_id_claim(self):
        token = jwt.encode({"iss": "K"}, "S", algorithm="HS256")
        with pytest.raises(IdentityFailure, match="does not contain an id"):
            extract_identity(f"Bearer {token}")

    def test_id_not_uuid(self):
        token = jwt.encode({"id": "42"}, "S", algorithm="HS256")
        with pytest.raises(IdentityFailure, match="not a valid UUID"):
            extract_identity(f"Bearer {token}")


# =============================================================================
# Passwords
# =============================================================================


class TestPasswordService:
    def test_hash_and_verify(self):
        service = PasswordService(rounds=4)
        hashed = service.hash("correct horse")

        assert hashed != "correct horse"
        assert service.verify("correct horse", hashed)
        assert not service.verify("wrong horse", hashed)

    def test_malformed_hash_is_mismatch(self):
        assert not PasswordService(rounds=4).verify("anything", "not-a-bcrypt-hash")


# =============================================================================
# Gateway credential exchange
# =============================================================================


def gateway_transport(requests, consumer_status=201, jwt_status=201, jwt_body=None):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/consumers":
            if consumer_status != 201:
                return httpx.Response(consumer_status, text="consumer already exists")
            return httpx.Response(201, json={"id": "c-1", "username": AUTH_PRINCIPAL})
        if request.url.path == f"/consumers/{AUTH_PRINCIPAL}/jwt":
            if jwt_status != 201:
                return httpx.Response(jwt_status, text="jwt plugin disabled")
            return httpx.Response(201, json=jwt_body or {"key": "K", "secret": "S"})
        return httpx.Response(404, text="no route")

    return httpx.MockTransport(handler)


class TestGatewayClient:
    @pytest.mark.asyncio
    async def test_exchange(self):
        requests = []
        client = GatewayClient("http://kong:8001/", transport=gateway_transport(requests))

        credential = await client.exchange()

        assert credential == Credential(key="K", secret="S")
        assert [r.url.path for r in requests] == ["/consumers", f"/consumers/{AUTH_PRINCIPAL}/jwt"]
        assert requests[0].method == "POST"
        assert requests[0].content == b"username=auth-service"
        assert requests[0].headers["content-type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_exchanged_credential_signs_tokens(self):
        credential = await GatewayClient("http://kong:8001", transport=gateway_transport([])).exchange()
        token = JWTService(credential).create_token(uuid4())
        assert jwt.decode(token, options={"verify_signature": False})["iss"] == "K"

    @pytest.mark.asyncio
    async def test_consumer_rejected(self):
        client = GatewayClient("http://kong:8001", transport=gateway_transport([], consumer_status=409))
        with pytest.raises(GatewayFailure, match="consumer already exists"):
            await client.exchange()

    @pytest.mark.asyncio
    async def test_credential_rejected_body_verbatim(self):
        requests = []
        client = GatewayClient("http://kong:8001", transport=gateway_transport(requests, jwt_status=500))
        with pytest.raises(GatewayFailure) as exc_info:
            await client.exchange()
        assert exc_info.value.message == "jwt plugin disabled"
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_credential_without_secret(self):
        client = GatewayClient("http://kong:8001", transport=gateway_transport([], jwt_body={"key": "K"}))
        with pytest.raises(GatewayFailure, match="without key or secret"):
            await client.exchange()

    @pytest.mark.asyncio
    async def test_not_configured(self):
        with pytest.raises(GatewayFailure, match="not configured"):
            await GatewayClient(None).exchange()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GatewayClient("http://kong:8001", transport=httpx.MockTransport(handler))
        with pytest.raises(GatewayFailure, match="connection refused"):
            await client.exchange()

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = GatewayClient("http://kong:8001", timeout=0.1, transport=httpx.MockTransport(handler))
        with pytest.raises(GatewayFailure, match="timed out"):
            await client.exchange()

    @pytest.mark.asyncio
    async def test_not_idempotent(self):
        requests = []
        client = GatewayClient("http://kong:8001", transport=gateway_transport(requests))
        await client.exchange()
        await client.exchange()
        assert [r.url.path for r in requests].count("/consumers") == 2
