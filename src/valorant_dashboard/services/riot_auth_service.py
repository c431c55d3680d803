"""Primary Riot authentication.

Drives credential login, MFA submission, and the two paste-in entry paths
(redirect URL and cookie string). Every public method returns a tagged
result; the only side effects are the upstream calls.
"""
from typing import Optional
import httpx
from pydantic import ValidationError
from valorant_dashboard.clients.riot_auth_client import RiotAuthClient
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.riot import (
    AuthFailure,
    AuthResponse,
    AuthState,
    AuthSuccess,
    LoginResult,
    MfaResult,
    MultifactorRequired,
)
from valorant_dashboard.services.cookie_codec import capture_set_cookies, merge_cookies
from valorant_dashboard.services.reauth_service import ReAuthenticator
from valorant_dashboard.services.token_extractor import resolve_tokens

# Upstream error codes that are safe to explain to the user
UPSTREAM_ERRORS = {
    "auth_failure": "Invalid username or password",
    "rate_limited": "Too many login attempts, please wait and try again",
    "multifactor_attempt_failed": "Incorrect verification code",
}


class RiotAuthenticator:
    """One instance per authentication attempt; ``state`` tracks progress."""

    def __init__(self,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 reauthenticator: Optional[ReAuthenticator] = None):
        self._transport = transport
        self.reauthenticator = reauthenticator or ReAuthenticator(transport=transport)
        self.state = AuthState.INIT
        self.logger = get_logger("riot_auth.login")

    def _transition(self, state: AuthState) -> None:
        self.logger.debug("Auth state transition", from_state=self.state.value, to_state=state.value)
        self.state = state

    def _fail(self, error: str) -> AuthFailure:
        self.logger.warning("Authentication failed", state=self.state.value, error=error)
        self.state = AuthState.FAILED
        return AuthFailure(error=error)

    async def authenticate(self, username: str, password: str) -> LoginResult:
        if not username or not password:
            return self._fail("Username and password are required")

        self.state = AuthState.INIT
        try:
            async with RiotAuthClient(transport=self._transport) as client:
                init_response = await client.init_authorization()
                if not init_response.is_success:
                    return self._fail(
                        f"Failed to initialize auth session: {init_response.status_code} {init_response.reason_phrase}"
                    )

                cookie = merge_cookies("", capture_set_cookies(init_response))
                if not cookie:
                    return self._fail("No session cookie received from auth initialization")

                self._transition(AuthState.CREDENTIALS_SUBMITTED)
                auth_response = await client.submit_credentials(username, password, cookie)
                if not auth_response.is_success:
                    return self._fail(
                        f"Authentication failed: {auth_response.status_code} {auth_response.reason_phrase}"
                    )

                cookie = merge_cookies(cookie, capture_set_cookies(auth_response))
                data = self._parse_auth_response(auth_response)
                if data is None:
                    return self._fail("Unexpected response from auth service")

                if data.type == "multifactor":
                    self._transition(AuthState.MFA_REQUIRED)
                    self.logger.info("Multifactor challenge issued",
                                     method=data.multifactor.method if data.multifactor else None)
                    return MultifactorRequired(cookie=cookie, multifactor=data.multifactor)

                return await self._complete(client, data, cookie)

        except Exception as e:
            self.logger.error("Credential login error", error=str(e))
            return self._fail(str(e) or "Unknown error occurred")

    async def submit_mfa(self, code: str, cookie: str) -> MfaResult:
        if not code or not cookie:
            return self._fail("MFA code and session cookie are required")

        self.state = AuthState.MFA_REQUIRED
        try:
            async with RiotAuthClient(transport=self._transport) as client:
                self._transition(AuthState.MFA_SUBMITTED)
                response = await client.submit_multifactor(code, cookie)
                if not response.is_success:
                    return self._fail(
                        f"MFA submission failed: {response.status_code} {response.reason_phrase}"
                    )

                cookie = merge_cookies(cookie, capture_set_cookies(response))
                data = self._parse_auth_response(response)
                if data is None:
                    return self._fail("Unexpected response from auth service")

                if data.type == "multifactor":
                    return self._fail("A second multifactor challenge is not supported")

                return await self._complete(client, data, cookie)

        except Exception as e:
            self.logger.error("MFA submission error", error=str(e))
            return self._fail(str(e) or "Unknown error occurred")

    async def complete_auth_with_url(self, url: str) -> MfaResult:
        """Finish a login from a pasted redirect URL carrying the token fragment."""
        if not url:
            return self._fail("Redirect URL is required")

        self.state = AuthState.INIT
        try:
            async with RiotAuthClient(transport=self._transport) as client:
                tokens = await resolve_tokens(client, url, self._transition)
                if isinstance(tokens, AuthFailure):
                    return self._fail(tokens.error)
                self._transition(AuthState.COMPLETE)
                return AuthSuccess(tokens=tokens)

        except Exception as e:
            self.logger.error("Redirect URL login error", error=str(e))
            return self._fail(str(e) or "Failed to process auth URL")

    async def complete_auth_with_cookies(self, cookie: str) -> MfaResult:
        """Log in from a pasted upstream cookie string via SSID re-auth."""
        if not cookie:
            return self._fail("Cookie string is required")

        self.state = AuthState.INIT
        result = await self.reauthenticator.refresh(cookie)
        if not result.success:
            return self._fail(result.error)

        self._transition(AuthState.COMPLETE)
        return AuthSuccess(tokens=result.tokens, riot_cookies=result.riot_cookies)

    def _parse_auth_response(self, response: httpx.Response) -> Optional[AuthResponse]:
        try:
            return AuthResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self.logger.warning("Auth response validation failed", error=str(e))
            return None

    async def _complete(self, client: RiotAuthClient, data: AuthResponse, cookie: str) -> MfaResult:
        if data.error or data.type == "error":
            code = data.error or "unknown_error"
            return self._fail(UPSTREAM_ERRORS.get(code, f"Authentication failed: {code}"))

        if data.type != "response":
            return self._fail(f"Unexpected auth response type: {data.type}")

        uri = data.redirect_uri
        if not uri:
            return self._fail("No redirect URI received in response")

        tokens = await resolve_tokens(client, uri, self._transition)
        if isinstance(tokens, AuthFailure):
            return self._fail(tokens.error)

        self._transition(AuthState.COMPLETE)
        self.logger.info("Authentication complete", region=tokens.region)
        return AuthSuccess(tokens=tokens, riot_cookies=cookie or None)
