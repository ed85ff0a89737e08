import time

import httpx
import jwt
import pytest
from fbadmin.auth import Auth
from fbadmin.auth.component import CUSTOM_TOKEN_AUDIENCE
from fbadmin.core import GoogleCredentials
from fbadmin.core.exceptions import (
    BadRequestError,
    ConfigError,
    TokenVerificationError,
)

from common import PROJECT_ID, MockServer
from common.keys import CLIENT_EMAIL, SigningKey

SIGNING_KEY = SigningKey()


class TokenServer(MockServer):
    """Serves the signing certificates and user lookups."""

    user: dict

    def __init__(self, user: dict | None = None):
        super().__init__(self.route)
        self.user = user or {"localId": "alice"}

    def route(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "www.googleapis.com":
            return httpx.Response(
                200,
                json=SIGNING_KEY.get_public_keys(),
                headers={"cache-control": "public, max-age=22000"},
            )
        if request.url.path.endswith("/accounts:lookup"):
            return httpx.Response(200, json={"users": [self.user]})
        return httpx.Response(404, json={})

    def get_cert_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "www.googleapis.com"]


def get_auth(server: MockServer, tenant_id: str | None = None) -> Auth:
    return Auth(server.get_transport(), PROJECT_ID, tenant_id=tenant_id)


def test_custom_token_claims():
    server = MockServer()
    transport = server.get_transport(
        credentials=GoogleCredentials(
            service_account_info=SIGNING_KEY.get_service_account_info()
        )
    )
    auth = Auth(transport, PROJECT_ID, tenant_id="tenant-1")

    token = auth.create_custom_token("alice", {"premium": True})

    claims = jwt.decode(
        token,
        SIGNING_KEY.private_key.public_key(),
        algorithms=["RS256"],
        audience=CUSTOM_TOKEN_AUDIENCE,
    )
    assert claims["iss"] == CLIENT_EMAIL
    assert claims["sub"] == CLIENT_EMAIL
    assert claims["uid"] == "alice"
    assert claims["claims"] == {"premium": True}
    assert claims["tenant_id"] == "tenant-1"
    assert claims["exp"] - claims["iat"] == 3600
    assert server.requests == []


def test_custom_token_rejects_reserved_claims():
    auth = get_auth(MockServer())
    with pytest.raises(BadRequestError):
        auth.create_custom_token("alice", {"aud": "x"})
    with pytest.raises(BadRequestError):
        auth.create_custom_token("")


def test_custom_token_requires_private_key():
    auth = get_auth(MockServer())
    with pytest.raises(ConfigError):
        auth.create_custom_token("alice")


@pytest.mark.asyncio
async def test_verify_id_token():
    server = TokenServer()
    auth = get_auth(server)

    decoded = await auth.verify_id_token(
        SIGNING_KEY.create_token(email="alice@example.com")
    )

    assert decoded.uid == "alice"
    assert decoded.aud == PROJECT_ID
    assert decoded.claims["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_public_keys_are_cached():
    server = TokenServer()
    auth = get_auth(server)

    await auth.verify_id_token(SIGNING_KEY.create_token())
    await auth.verify_id_token(SIGNING_KEY.create_token(sub="bob"))

    assert len(server.get_cert_requests()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "token",
    [
        SIGNING_KEY.create_token(aud="other-project"),
        SIGNING_KEY.create_token(issuer="https://example.com/test-project"),
        SIGNING_KEY.create_token(exp=int(time.time()) - 10),
        SIGNING_KEY.create_token(sub=""),
        SIGNING_KEY.create_token(kid="unknown"),
        SIGNING_KEY.create_token(auth_time=int(time.time()) + 3600),
        "not-a-token",
    ],
)
async def test_verify_id_token_rejects(token: str):
    auth = get_auth(TokenServer())
    with pytest.raises(TokenVerificationError):
        await auth.verify_id_token(token)


@pytest.mark.asyncio
async def test_verify_session_cookie():
    server = TokenServer()
    auth = get_auth(server)

    decoded = await auth.verify_session_cookie(
        SIGNING_KEY.create_token(
            issuer=f"https://session.firebase.google.com/{PROJECT_ID}"
        )
    )

    assert decoded.uid == "alice"
    assert server.get_cert_requests()[0].url.path.endswith("/publicKeys")


@pytest.mark.asyncio
async def test_session_cookie_rejects_id_token():
    auth = get_auth(TokenServer())
    with pytest.raises(TokenVerificationError):
        await auth.verify_session_cookie(SIGNING_KEY.create_token())


@pytest.mark.asyncio
async def test_verify_revoked_token():
    server = TokenServer(
        {"localId": "alice", "validSince": str(int(time.time()))}
    )
    auth = get_auth(server)
    token = SIGNING_KEY.create_token()

    assert (await auth.verify_id_token(token)).uid == "alice"
    with pytest.raises(TokenVerificationError):
        await auth.verify_id_token(token, check_revoked=True)


@pytest.mark.asyncio
async def test_verify_disabled_user():
    auth = get_auth(TokenServer({"localId": "alice", "disabled": True}))
    with pytest.raises(TokenVerificationError):
        await auth.verify_id_token(
            SIGNING_KEY.create_token(), check_revoked=True
        )


@pytest.mark.asyncio
async def test_verify_tenant_mismatch():
    auth = get_auth(TokenServer(), tenant_id="tenant-1")
    token = SIGNING_KEY.create_token(
        firebase={"sign_in_provider": "password", "tenant": "tenant-2"}
    )
    with pytest.raises(TokenVerificationError):
        await auth.verify_id_token(token)
