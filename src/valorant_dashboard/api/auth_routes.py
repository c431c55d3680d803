from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from valorant_dashboard.api.dependencies import (
    get_account_registry,
    get_authenticator,
    get_cookie_jar,
    get_session_manager,
)
from valorant_dashboard.api.exceptions import (
    AuthenticationFailedException,
    DashboardException,
    InvalidRequestException,
)
from valorant_dashboard.api.schemas import (
    AccountSummary,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    MultifactorResponse,
    SessionSummaryResponse,
)
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.riot import AuthSuccess, MultifactorRequired
from valorant_dashboard.models.session import AccountEntry, SessionTokens, now_ms
from valorant_dashboard.services.account_registry import AccountRegistry
from valorant_dashboard.services.browser_launcher import launch_login_browser
from valorant_dashboard.services.riot_auth_service import RiotAuthenticator
from valorant_dashboard.services.session_manager import SessionManager
from valorant_dashboard.utils.cookie_jar import CookieJar

logger = get_logger("api.auth")

LOGIN_TYPES = ("auth", "multifactor", "url", "cookie", "launch_browser")


async def _register_login(result: AuthSuccess, accounts: AccountRegistry) -> LoginResponse:
    tokens = result.tokens
    await accounts.add_account(
        AccountEntry(
            puuid=tokens.puuid,
            region=tokens.region,
            game_name=tokens.game_name,
            tag_line=tokens.tag_line,
            added_at=now_ms(),
        ),
        SessionTokens(**tokens.model_dump(), riot_cookies=result.riot_cookies),
    )
    return LoginResponse(data=AccountSummary(puuid=tokens.puuid, region=tokens.region))


def create_auth_router() -> APIRouter:
    router = APIRouter(prefix="/api", tags=["Authentication"])

    @router.post("/auth")
    async def login(
        body: LoginRequest,
        authenticator: RiotAuthenticator = Depends(get_authenticator),
        accounts: AccountRegistry = Depends(get_account_registry),
        cookies: CookieJar = Depends(get_cookie_jar),
    ):
        if body.type not in LOGIN_TYPES:
            raise InvalidRequestException("Invalid request type")

        if body.type == "launch_browser":
            launched, error = launch_login_browser()
            if not launched:
                raise DashboardException(error or "Failed to launch browser", status_code=500)
            return MessageResponse(message="Browser launched successfully")

        if body.type == "auth":
            if not body.username or not body.password:
                raise InvalidRequestException("Username and password are required")
            result = await authenticator.authenticate(body.username, body.password)
        elif body.type == "multifactor":
            if not body.code or not body.cookie:
                raise InvalidRequestException("MFA code and session cookie are required")
            result = await authenticator.submit_mfa(body.code, body.cookie)
        elif body.type == "url":
            if not body.url:
                raise InvalidRequestException("Redirect URL is required")
            result = await authenticator.complete_auth_with_url(body.url)
        else:
            if not body.cookie:
                raise InvalidRequestException("Cookie string is required")
            result = await authenticator.complete_auth_with_cookies(body.cookie)

        if isinstance(result, MultifactorRequired):
            return MultifactorResponse(
                cookie=result.cookie,
                multifactor=result.multifactor.model_dump(by_alias=True, exclude_none=True) if result.multifactor else None,
            )

        if not result.success:
            raise AuthenticationFailedException(result.error or "Authentication failed")

        response = await _register_login(result, accounts)
        logger.info("Login complete", login_type=body.type, region=response.data.region)
        return cookies.apply(JSONResponse(response.model_dump()))

    @router.post("/auth/logout")
    async def logout(
        accounts: AccountRegistry = Depends(get_account_registry),
        sessions: SessionManager = Depends(get_session_manager),
        cookies: CookieJar = Depends(get_cookie_jar),
    ):
        active = accounts.get_active_account()
        if active is not None:
            await accounts.remove_account(active.puuid)
        else:
            await sessions.delete_session()
        return cookies.apply(JSONResponse({"success": True}))

    @router.get("/session", response_model=SessionSummaryResponse)
    async def current_session(sessions: SessionManager = Depends(get_session_manager)):
        session = await sessions.get_session_with_refresh()
        if session is None:
            raise AuthenticationFailedException("Not authenticated")
        return SessionSummaryResponse(
            puuid=session.puuid,
            region=session.region,
            gameName=session.game_name,
            tagLine=session.tag_line,
            country=session.country,
            createdAt=session.created_at,
        )

    return router
