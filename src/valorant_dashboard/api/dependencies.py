from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from valorant_dashboard.config.settings import settings
from valorant_dashboard.database.connection import get_db
from valorant_dashboard.database.repositories import SessionStore
from valorant_dashboard.services.account_registry import AccountRegistry
from valorant_dashboard.services.reauth_service import ReAuthenticator
from valorant_dashboard.services.riot_auth_service import RiotAuthenticator
from valorant_dashboard.services.session_manager import SessionManager
from valorant_dashboard.utils.cookie_jar import CookieJar
from valorant_dashboard.utils.signing import TokenSigner


def get_cookie_jar(request: Request) -> CookieJar:
    return CookieJar(request.cookies, secure=settings.cookie_secure)


def get_signer() -> TokenSigner:
    return TokenSigner(settings.session_secret)


def get_reauthenticator() -> ReAuthenticator:
    return ReAuthenticator()


def get_authenticator(reauthenticator: ReAuthenticator = Depends(get_reauthenticator)) -> RiotAuthenticator:
    return RiotAuthenticator(reauthenticator=reauthenticator)


def get_session_manager(
    db: AsyncSession = Depends(get_db),
    cookies: CookieJar = Depends(get_cookie_jar),
    signer: TokenSigner = Depends(get_signer),
    reauthenticator: ReAuthenticator = Depends(get_reauthenticator),
) -> SessionManager:
    return SessionManager(SessionStore(db), cookies, signer, reauthenticator)


def get_account_registry(session_manager: SessionManager = Depends(get_session_manager)) -> AccountRegistry:
    return AccountRegistry(session_manager)
