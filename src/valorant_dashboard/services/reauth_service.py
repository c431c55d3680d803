"""SSID re-authentication.

Mints fresh tokens from a stored cookie string by replaying the browser
authorize redirect. The upstream answers with a short-lived session ssid
on this call; the original long-lived "remember me" ssid is the one kept
for future refreshes, so it is forced back into the returned cookies.
"""
from typing import Optional
import httpx
from valorant_dashboard.clients.riot_auth_client import RiotAuthClient, RIOT_LOGIN_PAGE
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.riot import (
    AuthFailure,
    RefreshResult,
    RefreshSuccess,
    RiotSessionCookies,
)
from valorant_dashboard.services.cookie_codec import (
    build_essential_cookie_string,
    capture_set_cookies,
    extract_named_cookies,
    merge_cookies,
)
from valorant_dashboard.services.token_extractor import resolve_tokens

REDIRECT_STATUSES = (301, 302, 303)


class ReAuthenticator:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self.logger = get_logger("riot_auth.reauth")

    async def refresh(self, riot_cookies: str) -> RefreshResult:
        named = extract_named_cookies(riot_cookies or "")
        if not named.ssid:
            return AuthFailure(error="No SSID cookie available for re-auth, full login required")

        self.logger.info("SSID re-auth attempt",
                         ssid="present",
                         clid="present" if named.clid else "missing",
                         csid="present" if named.csid else "missing",
                         tdid="present" if named.tdid else "missing")

        try:
            async with RiotAuthClient(transport=self._transport) as client:
                response = await client.authorize_with_cookies(riot_cookies)
                merged = merge_cookies(riot_cookies, capture_set_cookies(response))

                if response.status_code in REDIRECT_STATUSES:
                    location = response.headers.get("location") or ""

                    if "access_token" in location:
                        return await self._complete(client, location, named, merged)

                    if RIOT_LOGIN_PAGE in location:
                        self.logger.warning("Authorize redirected to login page, session expired")
                        return AuthFailure(error="Session expired (redirected to login)")

                    self.logger.warning("Authorize redirected to unexpected location",
                                        location=location.split("#")[0] or "(no location)")
                else:
                    self.logger.warning("Authorize returned unexpected status",
                                        status_code=response.status_code)

                return AuthFailure(error=f"SSID re-auth failed with status {response.status_code}")

        except Exception as e:
            self.logger.error("SSID re-auth error", error=str(e))
            return AuthFailure(error=str(e) or "SSID re-auth failed")

    async def _complete(self,
                        client: RiotAuthClient,
                        uri: str,
                        original: RiotSessionCookies,
                        response_cookies: str) -> RefreshResult:
        tokens = await resolve_tokens(client, uri)
        if isinstance(tokens, AuthFailure):
            return AuthFailure(error=f"{tokens.error} after re-auth")

        preserved = extract_named_cookies(response_cookies).model_copy(update={"ssid": original.ssid})
        cookie_string = build_essential_cookie_string(preserved)

        self.logger.info("SSID re-auth successful (preserved original ssid)")
        return RefreshSuccess(
            tokens=tokens,
            riot_cookies=cookie_string,
            named_cookies=preserved.model_copy(update={"raw": cookie_string}),
        )
