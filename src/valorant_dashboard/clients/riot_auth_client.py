import secrets
from typing import Dict, Optional
import httpx
from valorant_dashboard.config.settings import settings
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.utils.backoff import ExponentialBackoff

RIOT_AUTH_URL = "https://auth.riotgames.com/api/v1/authorization"
RIOT_AUTHORIZE_URL = "https://auth.riotgames.com/authorize"
RIOT_ENTITLEMENTS_URL = "https://entitlements.auth.riotgames.com/api/token/v1"
RIOT_USERINFO_URL = "https://auth.riotgames.com/userinfo"
RIOT_LOGIN_PAGE = "authenticate.riotgames.com/login"

CLIENT_ID = "play-valorant-web-prod"
REDIRECT_URI = "https://playvalorant.com/opt_in"
AUTH_SCOPE = "account openid"

# Riot Client user agent; a browser UA triggers captcha far more often
RIOT_CLIENT_UA = "RiotGamesApi/24.11.0.4602 rso-auth (Windows;10;;Professional, x64) riot_client/0"


def random_hex(num_bytes: int) -> str:
    return secrets.token_hex(num_bytes)


def generate_traceparent() -> str:
    return f"00-{random_hex(16)}-{random_hex(8)}-00"


def riot_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "User-Agent": RIOT_CLIENT_UA,
        "Accept": "application/json",
        "baggage": f"sdksid={random_hex(16)}",
        "traceparent": generate_traceparent(),
    }
    if extra:
        headers.update(extra)
    return headers


def login_page_url() -> str:
    """Browser login URL whose final redirect carries the token fragment."""
    return str(httpx.URL(RIOT_AUTHORIZE_URL, params={
        "redirect_uri": REDIRECT_URI,
        "client_id": CLIENT_ID,
        "response_type": "token id_token",
        "nonce": "1",
        "scope": AUTH_SCOPE,
    }))


class RiotAuthClient:
    """Thin async wrapper over the Riot auth endpoints.

    Every call is bounded by a timeout and retried on transport errors only.
    Status codes are handed back untouched; interpreting them is up to the
    caller. Use as an async context manager, one instance per attempt.
    """

    def __init__(self,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Optional[float] = None,
                 backoff: Optional[ExponentialBackoff] = None):
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self.backoff = backoff or ExponentialBackoff(
            max_retries=settings.upstream_max_retries,
            base_delay=settings.upstream_retry_base_delay,
        )
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = get_logger("riot_auth.client")

    async def __aenter__(self) -> "RiotAuthClient":
        self._client = httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("RiotAuthClient must be used as an async context manager")

        async def _make_request():
            self.logger.debug("Making HTTP request", method=method, url=url)
            return await self._client.request(method, url, **kwargs)

        response = await self.backoff.execute(_make_request)
        self.logger.debug("HTTP response", method=method, url=url, status_code=response.status_code)
        return response

    async def init_authorization(self) -> httpx.Response:
        return await self.request("POST", RIOT_AUTH_URL, headers=riot_headers(), json={
            "client_id": CLIENT_ID,
            "nonce": "1",
            "redirect_uri": REDIRECT_URI,
            "response_type": "token id_token",
            "scope": AUTH_SCOPE,
        })

    async def submit_credentials(self, username: str, password: str, cookie: str) -> httpx.Response:
        return await self.request("PUT", RIOT_AUTH_URL, headers=riot_headers({"Cookie": cookie}), json={
            "type": "auth",
            "username": username,
            "password": password,
            "remember": True,
        })

    async def submit_multifactor(self, code: str, cookie: str) -> httpx.Response:
        return await self.request("PUT", RIOT_AUTH_URL, headers=riot_headers({"Cookie": cookie}), json={
            "type": "multifactor",
            "code": code,
            "rememberDevice": True,
        })

    async def authorize_with_cookies(self, cookie: str) -> httpx.Response:
        params = {
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "response_type": "token id_token",
            "nonce": random_hex(16),
            "scope": AUTH_SCOPE,
        }
        return await self.request("GET", RIOT_AUTHORIZE_URL, params=params, headers={
            "Cookie": cookie,
            "User-Agent": RIOT_CLIENT_UA,
        })

    async def fetch_entitlements(self, access_token: str) -> httpx.Response:
        return await self.request("POST", RIOT_ENTITLEMENTS_URL, json={}, headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        })

    async def fetch_userinfo(self, access_token: str) -> httpx.Response:
        return await self.request("GET", RIOT_USERINFO_URL, headers={
            "Authorization": f"Bearer {access_token}",
        })
