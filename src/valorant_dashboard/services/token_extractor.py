from typing import Callable, NamedTuple, Optional, Union
from urllib.parse import parse_qs, urlsplit
import httpx
from pydantic import ValidationError
from valorant_dashboard.clients.riot_auth_client import RiotAuthClient
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.riot import AuthFailure, AuthState, AuthTokens, EntitlementsResponse, UserInfo
from valorant_dashboard.services.region_resolver import determine_region

logger = get_logger("riot_auth.tokens")


class UriTokens(NamedTuple):
    access_token: str
    id_token: str


def extract_tokens_from_uri(uri: str) -> Optional[UriTokens]:
    """Pull access_token and id_token out of a redirect URI fragment."""
    try:
        parts = urlsplit(uri)
        if not parts.scheme or not parts.netloc or not parts.fragment:
            return None
        params = parse_qs(parts.fragment)
    except (TypeError, ValueError, AttributeError):
        return None

    access_token = (params.get("access_token") or [""])[0]
    id_token = (params.get("id_token") or [""])[0]
    if not access_token or not id_token:
        return None
    return UriTokens(access_token=access_token, id_token=id_token)


async def get_entitlements_token(client: RiotAuthClient, access_token: str) -> Optional[str]:
    try:
        response = await client.fetch_entitlements(access_token)
    except httpx.HTTPError as e:
        logger.warning("Entitlements request failed", error=str(e))
        return None

    if not response.is_success:
        logger.warning("Entitlements request rejected", status_code=response.status_code)
        return None

    try:
        data = EntitlementsResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Entitlements response validation failed", error=str(e))
        return None
    return data.entitlements_token or None


async def get_user_info(client: RiotAuthClient, access_token: str) -> Optional[UserInfo]:
    try:
        response = await client.fetch_userinfo(access_token)
    except httpx.HTTPError as e:
        logger.warning("Userinfo request failed", error=str(e))
        return None

    if not response.is_success:
        logger.warning("Userinfo request rejected", status_code=response.status_code)
        return None

    try:
        return UserInfo.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Userinfo response validation failed", error=str(e))
        return None


async def resolve_tokens(client: RiotAuthClient,
                         uri: str,
                         on_step: Optional[Callable[[AuthState], None]] = None) -> Union[AuthTokens, AuthFailure]:
    """Shared tail of every login path: redirect URI -> entitlements -> userinfo -> region."""
    step = on_step or (lambda state: None)

    tokens = extract_tokens_from_uri(uri)
    if tokens is None:
        return AuthFailure(error="Failed to extract tokens from redirect URI")
    step(AuthState.TOKENS_EXTRACTED)

    entitlements_token = await get_entitlements_token(client, tokens.access_token)
    if not entitlements_token:
        return AuthFailure(error="Failed to retrieve entitlements token")
    step(AuthState.ENTITLEMENTS_RESOLVED)

    user_info = await get_user_info(client, tokens.access_token)
    if user_info is None:
        return AuthFailure(error="Failed to retrieve user information")
    step(AuthState.USERINFO_RESOLVED)

    acct = user_info.acct
    return AuthTokens(
        access_token=tokens.access_token,
        id_token=tokens.id_token,
        entitlements_token=entitlements_token,
        puuid=user_info.sub,
        region=determine_region(user_info),
        game_name=acct.game_name if acct else None,
        tag_line=acct.tag_line if acct else None,
        country=user_info.country,
    )
