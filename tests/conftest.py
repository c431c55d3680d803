import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPSTREAM_RETRY_BASE_DELAY", "0")

import json
import pytest
import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from valorant_dashboard.database.repositories import SessionStore
from valorant_dashboard.models.stored_session import Base
from valorant_dashboard.utils.cookie_jar import CookieJar
from valorant_dashboard.utils.signing import TokenSigner

PUUID = "a1b2c3d4-0000-1111-2222-333344445555"
REDIRECT_URI = "https://playvalorant.com/opt_in#access_token=access-123&scope=openid&id_token=id-456&token_type=Bearer&expires_in=3600"


class FakeRiot:
    """In-process stand-in for the Riot auth endpoints, served through httpx.MockTransport."""

    def __init__(self):
        self.login_mode = "response"       # response | multifactor | error | auth_error
        self.mfa_mode = "response"         # response | multifactor | error
        self.authorize_mode = "success"    # success | login_page | status
        self.entitlements_status = 200
        self.userinfo_status = 200
        self.puuid = PUUID
        self.userinfo = {
            "sub": PUUID,
            "country": "usa",
            "affinity": {"pp": "na"},
            "acct": {"game_name": "Player", "tag_line": "NA1", "type": 0},
            "email_verified": True,
        }
        self.requests = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, path: str) -> list:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def _auth_result(self, mode: str, cookies: list) -> httpx.Response:
        if mode == "multifactor":
            body = {
                "type": "multifactor",
                "multifactor": {"email": "p***@example.com", "method": "email", "multiFactorCodeLength": 6},
            }
            return httpx.Response(200, json=body)
        if mode == "error":
            return httpx.Response(200, json={"type": "error", "error": "auth_failure"})
        if mode == "auth_error":
            return httpx.Response(200, json={"type": "auth", "error": "auth_failure", "country": "usa"})
        body = {"type": "response", "response": {"mode": "fragment", "parameters": {"uri": REDIRECT_URI}}}
        return httpx.Response(200, json=body, headers=[("set-cookie", c) for c in cookies])

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path = request.url.host, request.url.path

        if host == "auth.riotgames.com" and path == "/api/v1/authorization":
            if request.method == "POST":
                return httpx.Response(200, json={"type": "auth"}, headers=[
                    ("set-cookie", "asid=init-asid; Path=/; HttpOnly; Secure"),
                    ("set-cookie", "clid=uw1; Path=/; Expires=Wed, 21 Oct 2026 07:28:00 GMT"),
                ])
            body = json.loads(request.content)
            if body["type"] == "auth":
                return self._auth_result(self.login_mode, [
                    "ssid=long-lived-ssid; Path=/; Secure",
                    "tdid=device-1; Path=/",
                    "sub=ignored; Path=/",
                ])
            return self._auth_result(self.mfa_mode, [
                "ssid=long-lived-ssid; Path=/; Secure",
                "csid=mfa-csid; Path=/",
            ])

        if host == "auth.riotgames.com" and path == "/authorize":
            if self.authorize_mode == "success":
                return httpx.Response(303, headers=[
                    ("location", REDIRECT_URI),
                    ("set-cookie", "ssid=short-lived-ssid; Path=/; Secure"),
                    ("set-cookie", "clid=uw2; Path=/"),
                    ("set-cookie", "csid=fresh-csid; Path=/"),
                ])
            if self.authorize_mode == "login_page":
                return httpx.Response(303, headers=[("location", "https://authenticate.riotgames.com/login?x=1")])
            return httpx.Response(200, text="<html></html>")

        if host == "entitlements.auth.riotgames.com":
            if self.entitlements_status != 200:
                return httpx.Response(self.entitlements_status)
            return httpx.Response(200, json={"entitlements_token": "entitlements-789"})

        if host == "auth.riotgames.com" and path == "/userinfo":
            if self.userinfo_status != 200:
                return httpx.Response(self.userinfo_status)
            return httpx.Response(200, json=self.userinfo)

        return httpx.Response(404)


@pytest.fixture
def fake_riot():
    return FakeRiot()


@pytest.fixture
async def test_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with AsyncSessionLocal() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def store(test_db):
    return SessionStore(test_db)


@pytest.fixture
def signer():
    return TokenSigner("test-secret")


@pytest.fixture
def cookie_jar():
    return CookieJar()
