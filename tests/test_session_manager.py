import pytest
from valorant_dashboard.models.riot import AuthFailure, AuthTokens, RefreshSuccess, RiotSessionCookies
from valorant_dashboard.models.session import SessionData, now_ms
from valorant_dashboard.services.session_manager import (
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE,
    SessionManager,
)
from valorant_dashboard.utils.cookie_jar import CookieJar
from valorant_dashboard.utils.signing import TokenSigner

MINUTE_MS = 60 * 1000


class StubReAuthenticator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def refresh(self, riot_cookies):
        self.calls.append(riot_cookies)
        if self.error:
            raise self.error
        return self.result


def _tokens(access_token="fresh-access"):
    return AuthTokens(
        access_token=access_token,
        id_token="fresh-id",
        entitlements_token="fresh-entitlements",
        puuid="puuid-1",
        region="eu",
        game_name="Player",
        tag_line="EUW",
    )


def _refresh_success():
    return RefreshSuccess(
        tokens=_tokens(),
        riot_cookies="ssid=s1; clid=c2",
        named_cookies=RiotSessionCookies(raw="ssid=s1; clid=c2", ssid="s1", clid="c2"),
    )


def _manager(store, signer, reauthenticator=None, cookies=None):
    return SessionManager(store, cookies or CookieJar(), signer, reauthenticator or StubReAuthenticator())


async def _seed(manager, age_minutes, riot_cookies="ssid=s1; clid=c1"):
    data = SessionData(
        access_token="old-access",
        entitlements_token="old-entitlements",
        puuid="puuid-1",
        region="eu",
        riot_cookies=riot_cookies,
        created_at=now_ms() - age_minutes * MINUTE_MS,
    )
    await manager.store.save("sid-1", data, SESSION_MAX_AGE)
    manager.issue_reference(SESSION_COOKIE_NAME, "sid-1")
    return data


@pytest.mark.asyncio
async def test_create_and_get_session(store, signer):
    manager = _manager(store, signer)
    created = await manager.create_session(_tokens(), "asid=x; ssid=s1; tdid=t1")

    assert created.riot_cookies == "ssid=s1; tdid=t1"
    assert abs(created.created_at - now_ms()) < 5000

    session = await manager.get_session()
    assert session.access_token == "fresh-access"
    assert session.puuid == "puuid-1"
    assert await manager.has_valid_session() is True


@pytest.mark.asyncio
async def test_reference_cookie_holds_only_session_id(store, signer):
    manager = _manager(store, signer)
    await manager.create_session(_tokens())

    claims = signer.verify(manager.cookies.get(SESSION_COOKIE_NAME))
    assert set(claims) == {"sessionId", "iat", "exp"}
    assert claims["exp"] - claims["iat"] == SESSION_MAX_AGE


@pytest.mark.asyncio
async def test_create_session_replaces_previous_row(store, signer):
    manager = _manager(store, signer)
    await manager.create_session(_tokens("first"))
    await manager.create_session(_tokens("second"))

    assert await store.count() == 1
    assert (await manager.get_session()).access_token == "second"


@pytest.mark.asyncio
async def test_no_cookie_means_no_session(store, signer):
    manager = _manager(store, signer)
    assert await manager.get_session() is None
    assert await manager.has_valid_session() is False


@pytest.mark.asyncio
async def test_forged_cookie_is_rejected(store, signer):
    forged = TokenSigner("someone-else").sign({"sessionId": "sid-1"}, 3600)
    manager = _manager(store, signer, cookies=CookieJar({SESSION_COOKIE_NAME: forged}))
    await store.save("sid-1", SessionData(
        access_token="a", entitlements_token="e", puuid="p", region="na", created_at=now_ms(),
    ), 3600)

    assert await manager.get_session() is None


@pytest.mark.asyncio
async def test_delete_session(store, signer):
    manager = _manager(store, signer)
    await manager.create_session(_tokens())
    await manager.delete_session()

    assert manager.cookies.get(SESSION_COOKIE_NAME) is None
    assert await store.count() == 0
    assert await manager.get_session() is None


@pytest.mark.asyncio
async def test_refresh_session_issues_new_id(store, signer):
    manager = _manager(store, signer)
    await _seed(manager, age_minutes=1)

    assert await manager.refresh_session() is True
    assert manager.resolve_reference(SESSION_COOKIE_NAME) != "sid-1"
    assert await store.get("sid-1") is None
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_fresh_session_is_not_refreshed(store, signer):
    reauth = StubReAuthenticator(result=_refresh_success())
    manager = _manager(store, signer, reauth)
    await _seed(manager, age_minutes=10)

    session = await manager.get_session_with_refresh()
    assert session.access_token == "old-access"
    assert reauth.calls == []


@pytest.mark.asyncio
async def test_stale_session_is_refreshed_in_place(store, signer):
    reauth = StubReAuthenticator(result=_refresh_success())
    manager = _manager(store, signer, reauth)
    await _seed(manager, age_minutes=56)

    session = await manager.get_session_with_refresh()
    assert reauth.calls == ["ssid=s1; clid=c1"]
    assert session.access_token == "fresh-access"
    assert session.riot_cookies == "ssid=s1; clid=c2"
    assert now_ms() - session.created_at < 5000

    # Same row, same reference cookie
    assert manager.resolve_reference(SESSION_COOKIE_NAME) == "sid-1"
    assert (await store.get("sid-1")).access_token == "fresh-access"


@pytest.mark.asyncio
async def test_failed_refresh_within_grace_returns_stale(store, signer):
    reauth = StubReAuthenticator(result=AuthFailure(error="Session expired (redirected to login)"))
    manager = _manager(store, signer, reauth)
    await _seed(manager, age_minutes=56)

    session = await manager.get_session_with_refresh()
    assert session.access_token == "old-access"
    assert await store.get("sid-1") is not None


@pytest.mark.asyncio
async def test_failed_refresh_past_hard_expiry_deletes(store, signer):
    reauth = StubReAuthenticator(result=AuthFailure(error="Session expired (redirected to login)"))
    manager = _manager(store, signer, reauth)
    await _seed(manager, age_minutes=66)

    assert await manager.get_session_with_refresh() is None
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_refresh_past_hard_expiry_can_still_succeed(store, signer):
    manager = _manager(store, signer, StubReAuthenticator(result=_refresh_success()))
    await _seed(manager, age_minutes=66)

    session = await manager.get_session_with_refresh()
    assert session.access_token == "fresh-access"


@pytest.mark.asyncio
async def test_refresh_error_is_treated_as_failure(store, signer):
    manager = _manager(store, signer, StubReAuthenticator(error=RuntimeError("boom")))
    await _seed(manager, age_minutes=56)

    session = await manager.get_session_with_refresh()
    assert session.access_token == "old-access"


@pytest.mark.asyncio
async def test_missing_riot_cookies(store, signer):
    reauth = StubReAuthenticator(result=_refresh_success())
    manager = _manager(store, signer, reauth)

    await _seed(manager, age_minutes=56, riot_cookies=None)
    assert (await manager.get_session_with_refresh()).access_token == "old-access"

    await _seed(manager, age_minutes=70, riot_cookies=None)
    assert await manager.get_session_with_refresh() is None
    assert reauth.calls == []


@pytest.mark.asyncio
async def test_store_errors_past_hard_expiry_do_not_raise(store, signer, monkeypatch):
    manager = _manager(store, signer, StubReAuthenticator(result=_refresh_success()))
    await _seed(manager, age_minutes=66)

    async def broken(*args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(store, "save", broken)
    monkeypatch.setattr(store, "delete", broken)

    assert await manager.get_session_with_refresh() is None
