"""Live-session lifecycle.

The browser holds a signed ``{sessionId}`` reference cookie; the tokens
themselves live in the server-side session store. Reads go through
``get_session_with_refresh`` which silently re-authenticates once the
access token is close to its one hour lifetime.
"""
import secrets
from typing import Optional, Tuple, Union
from valorant_dashboard.config.logging import get_logger, short_puuid
from valorant_dashboard.database.repositories import SessionStore
from valorant_dashboard.models.riot import AuthTokens
from valorant_dashboard.models.session import SessionData, SessionTokens, now_ms
from valorant_dashboard.services.cookie_codec import filter_essential_cookies
from valorant_dashboard.services.reauth_service import ReAuthenticator
from valorant_dashboard.utils.cookie_jar import CookieJar
from valorant_dashboard.utils.signing import TokenSigner

SESSION_COOKIE_NAME = "valorant_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 30  # 30 days in seconds
TOKEN_EXPIRY_THRESHOLD = 55 * 60 * 1000  # soft threshold, ms
TOKEN_HARD_EXPIRY = 65 * 60 * 1000  # hard threshold, ms

SessionSource = Union[AuthTokens, SessionTokens, SessionData]


def new_session_id() -> str:
    """256 bits from the OS CSPRNG."""
    return secrets.token_urlsafe(32)


def build_session_data(tokens: SessionSource, riot_cookies: Optional[str] = None) -> SessionData:
    """Fold tokens into a fresh SessionData, keeping only the essential upstream cookies."""
    cookies = riot_cookies if riot_cookies is not None else getattr(tokens, "riot_cookies", None)
    return SessionData(
        access_token=tokens.access_token,
        id_token=tokens.id_token,
        entitlements_token=tokens.entitlements_token,
        puuid=tokens.puuid,
        region=tokens.region,
        game_name=tokens.game_name,
        tag_line=tokens.tag_line,
        country=tokens.country,
        riot_cookies=filter_essential_cookies(cookies),
        created_at=now_ms(),
    )


class SessionManager:

    def __init__(self,
                 store: SessionStore,
                 cookies: CookieJar,
                 signer: TokenSigner,
                 reauthenticator: Optional[ReAuthenticator] = None):
        self.store = store
        self.cookies = cookies
        self.signer = signer
        self.reauthenticator = reauthenticator or ReAuthenticator()
        self.logger = get_logger("session.manager")

    def resolve_reference(self, cookie_name: str) -> Optional[str]:
        """Session ID held by a signed reference cookie, or None."""
        claims = self.signer.verify(self.cookies.get(cookie_name))
        if not claims:
            return None
        session_id = claims.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            self.logger.warning("Invalid session token payload", cookie=cookie_name)
            return None
        return session_id

    def issue_reference(self, cookie_name: str, session_id: str) -> None:
        token = self.signer.sign({"sessionId": session_id}, SESSION_MAX_AGE)
        self.cookies.set(cookie_name, token, SESSION_MAX_AGE)

    async def create_session(self, tokens: SessionSource, riot_cookies: Optional[str] = None) -> SessionData:
        data = build_session_data(tokens, riot_cookies)

        previous_id = self.resolve_reference(SESSION_COOKIE_NAME)
        if previous_id:
            await self.store.delete(previous_id)

        session_id = new_session_id()
        await self.store.save(session_id, data, SESSION_MAX_AGE)
        self.issue_reference(SESSION_COOKIE_NAME, session_id)

        self.logger.debug("Created new session", puuid=short_puuid(data.puuid))
        return data

    async def _get_session_internal(self) -> Optional[Tuple[str, SessionData]]:
        try:
            session_id = self.resolve_reference(SESSION_COOKIE_NAME)
            if not session_id:
                return None

            data = await self.store.get(session_id)
            if data is None:
                self.logger.warning("Session not found in store (expired/deleted)")
                return None
            return session_id, data

        except Exception as e:
            self.logger.error("Session retrieval failed", error=str(e))
            return None

    async def get_session(self) -> Optional[SessionData]:
        result = await self._get_session_internal()
        return result[1] if result else None

    async def has_valid_session(self) -> bool:
        return await self.get_session() is not None

    async def delete_session(self) -> None:
        """Drop the store row behind the live cookie, then clear the cookie regardless."""
        session_id = self.resolve_reference(SESSION_COOKIE_NAME)
        if session_id:
            try:
                await self.store.delete(session_id)
            except Exception as e:
                self.logger.error("Failed to delete session from store", error=str(e))
        self.cookies.delete(SESSION_COOKIE_NAME)

    async def refresh_session(self) -> bool:
        """Re-issue the live session under a new ID and a renewed cookie lifetime."""
        session = await self.get_session()
        if session is None:
            return False
        await self.create_session(session)
        return True

    async def get_session_with_refresh(self) -> Optional[SessionData]:
        result = await self._get_session_internal()
        if result is None:
            return None

        session_id, session = result
        token_age = now_ms() - (session.created_at or 0)

        if token_age <= TOKEN_EXPIRY_THRESHOLD:
            return session

        self.logger.info("Access token likely expired, attempting SSID refresh",
                         age_minutes=round(token_age / 60000),
                         puuid=short_puuid(session.puuid))
        definitely_dead = token_age > TOKEN_HARD_EXPIRY

        if not session.riot_cookies:
            self.logger.warning("No stored Riot cookies for token refresh")
            return await self._stale_or_none(session_id, session, definitely_dead)

        try:
            refresh = await self.reauthenticator.refresh(session.riot_cookies)
            if not refresh.success:
                self.logger.warning("Token refresh failed", error=refresh.error)
                return await self._stale_or_none(session_id, session, definitely_dead)

            fresh = build_session_data(refresh.tokens, refresh.riot_cookies)
            # Same ID: the client's reference cookie keeps working
            await self.store.save(session_id, fresh, SESSION_MAX_AGE)
            self.logger.info("Session refreshed successfully (in-place update)",
                             puuid=short_puuid(fresh.puuid))
            return fresh

        except Exception as e:
            self.logger.error("Token refresh error", error=str(e))
            return await self._stale_or_none(session_id, session, definitely_dead)

    async def _stale_or_none(self, session_id: str, session: SessionData, definitely_dead: bool) -> Optional[SessionData]:
        if definitely_dead:
            try:
                await self.store.delete(session_id)
            except Exception as e:
                self.logger.error("Failed to delete expired session from store", error=str(e))
            return None
        return session
