from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from valorant_dashboard.api.dependencies import get_account_registry, get_cookie_jar
from valorant_dashboard.api.exceptions import AccountNotFoundException, InvalidRequestException
from valorant_dashboard.api.schemas import (
    AccountListResponse,
    ActiveAccount,
    MessageResponse,
    SwitchAccountRequest,
    SwitchAccountResponse,
)
from valorant_dashboard.config.logging import get_logger, short_puuid
from valorant_dashboard.services.account_registry import AccountRegistry
from valorant_dashboard.utils.cookie_jar import CookieJar

logger = get_logger("api.accounts")


def create_account_router() -> APIRouter:
    router = APIRouter(prefix="/api/accounts", tags=["Accounts"])

    @router.get("")
    async def list_accounts(
        accounts: AccountRegistry = Depends(get_account_registry),
        cookies: CookieJar = Depends(get_cookie_jar),
    ):
        response = AccountListResponse(accounts=await accounts.list_accounts())
        return cookies.apply(JSONResponse(response.model_dump()))

    @router.delete("")
    async def remove_account(
        puuid: Optional[str] = Query(default=None),
        accounts: AccountRegistry = Depends(get_account_registry),
        cookies: CookieJar = Depends(get_cookie_jar),
    ):
        if not puuid:
            raise InvalidRequestException("PUUID is required")

        await accounts.remove_account(puuid)
        logger.info("Removed account", puuid=short_puuid(puuid))

        response = MessageResponse(message="Account removed successfully")
        return cookies.apply(JSONResponse(response.model_dump()))

    @router.post("/switch")
    async def switch_account(
        body: SwitchAccountRequest,
        accounts: AccountRegistry = Depends(get_account_registry),
        cookies: CookieJar = Depends(get_cookie_jar),
    ):
        if not body.puuid:
            raise InvalidRequestException("PUUID is required")

        if not await accounts.switch_account(body.puuid):
            raise AccountNotFoundException(
                "Failed to switch account. Account may not exist or session may be expired."
            )

        active = accounts.get_active_account()
        response = SwitchAccountResponse(
            message="Account switched successfully",
            activeAccount=ActiveAccount(
                puuid=active.puuid,
                region=active.region,
                gameName=active.game_name,
                tagLine=active.tag_line,
            ) if active else None,
        )
        return cookies.apply(JSONResponse(response.model_dump()))

    return router
