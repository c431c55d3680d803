"""Multi-account registry.

Cookie layout:
- ``valorant_accounts``: signed registry of up to five accounts plus the active PUUID
- ``valorant_session``: reference to the active account's live session
- ``valorant_session_<puuid[:8]>``: reference to a stored account's own session row

The registry is the only writer of both the registry cookie and the
per-account session rows, which keeps the two consistent.
"""
from typing import List, Optional
from pydantic import ValidationError
from valorant_dashboard.config.logging import get_logger, short_puuid
from valorant_dashboard.database.repositories import SessionStore
from valorant_dashboard.models.session import AccountEntry, AccountsData, SessionData, SessionTokens
from valorant_dashboard.services.session_manager import (
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE,
    SessionManager,
    build_session_data,
    new_session_id,
)
from valorant_dashboard.utils.cookie_jar import CookieJar
from valorant_dashboard.utils.signing import TokenSigner

ACCOUNTS_COOKIE_NAME = "valorant_accounts"
ACCOUNTS_MAX_AGE = 60 * 60 * 24 * 30  # 30 days in seconds
MAX_ACCOUNTS = 5


def account_cookie_name(puuid: str) -> str:
    return f"{SESSION_COOKIE_NAME}_{short_puuid(puuid)}"


class AccountRegistry:

    def __init__(self,
                 session_manager: SessionManager,
                 store: Optional[SessionStore] = None,
                 cookies: Optional[CookieJar] = None,
                 signer: Optional[TokenSigner] = None):
        self.sessions = session_manager
        self.store = store or session_manager.store
        self.cookies = cookies or session_manager.cookies
        self.signer = signer or session_manager.signer
        self.logger = get_logger("session.accounts")

    # Registry cookie

    def get_accounts(self) -> Optional[AccountsData]:
        claims = self.signer.verify(self.cookies.get(ACCOUNTS_COOKIE_NAME))
        if not claims:
            return None

        if not isinstance(claims.get("accounts"), list):
            self.logger.warning("Account registry payload is malformed")
            return None

        try:
            return AccountsData(
                accounts=[AccountEntry.model_validate(entry) for entry in claims["accounts"]],
                active_puuid=claims.get("activePuuid") or "",
            )
        except ValidationError as e:
            self.logger.warning("Account registry entry is malformed", error=str(e))
            return None

    def _save_accounts(self, registry: AccountsData) -> None:
        token = self.signer.sign(registry.to_payload(), ACCOUNTS_MAX_AGE)
        self.cookies.set(ACCOUNTS_COOKIE_NAME, token, ACCOUNTS_MAX_AGE)

    # Per-account session rows

    async def _save_account_session(self, puuid: str, data: SessionData) -> None:
        """Store a snapshot for ``puuid``, reusing its existing row when the cookie still points at one."""
        cookie_name = account_cookie_name(puuid)
        session_id = self.sessions.resolve_reference(cookie_name) or new_session_id()
        await self.store.save(session_id, data, SESSION_MAX_AGE)
        self.sessions.issue_reference(cookie_name, session_id)

    async def _load_account_session(self, puuid: str) -> Optional[SessionData]:
        session_id = self.sessions.resolve_reference(account_cookie_name(puuid))
        if not session_id:
            return None
        data = await self.store.get(session_id)
        if data is None or data.puuid != puuid:
            return None
        return data

    async def _delete_account_session(self, puuid: str) -> None:
        cookie_name = account_cookie_name(puuid)
        session_id = self.sessions.resolve_reference(cookie_name)
        if session_id:
            await self.store.delete(session_id)
        self.cookies.delete(cookie_name)

    # Operations

    async def add_account(self, entry: AccountEntry, session_tokens: SessionTokens) -> AccountsData:
        registry = self.get_accounts() or AccountsData(accounts=[], active_puuid="")

        existing = registry.find(entry.puuid)
        if existing is not None:
            existing.region = entry.region
            existing.game_name = entry.game_name
            existing.tag_line = entry.tag_line
            self.logger.info("Updated existing account", puuid=short_puuid(entry.puuid))
        else:
            if len(registry.accounts) >= MAX_ACCOUNTS:
                removed = registry.accounts.pop(0)
                await self._delete_account_session(removed.puuid)
                self.logger.info("Removed oldest account (max accounts reached)",
                                 puuid=short_puuid(removed.puuid))
            registry.accounts.append(entry)
            self.logger.info("Added new account", puuid=short_puuid(entry.puuid))

        registry.active_puuid = entry.puuid
        self._save_accounts(registry)

        session_data = build_session_data(session_tokens)
        await self._save_account_session(entry.puuid, session_data)
        await self.sessions.create_session(session_data)

        self.logger.info("Account is now active",
                         puuid=short_puuid(entry.puuid),
                         total=len(registry.accounts))
        return registry

    async def switch_account(self, target_puuid: str) -> bool:
        registry = self.get_accounts()
        if registry is None:
            self.logger.error("No account registry found")
            return False

        if registry.find(target_puuid) is None:
            self.logger.error("Account not found in registry", puuid=short_puuid(target_puuid))
            return False

        current = await self.sessions.get_session()
        if current is not None and current.puuid == target_puuid:
            # Live row is newer than the stored snapshot; keep it
            registry.active_puuid = target_puuid
            self._save_accounts(registry)
            self.logger.info("Account already active", puuid=short_puuid(target_puuid))
            return True

        if current is not None:
            await self._save_account_session(current.puuid, current)
            self.logger.info("Saved current session", puuid=short_puuid(current.puuid))

        target_session = await self._load_account_session(target_puuid)
        if target_session is None:
            self.logger.error("Session not found for account", puuid=short_puuid(target_puuid))
            return False

        await self.sessions.create_session(target_session)
        registry.active_puuid = target_puuid
        self._save_accounts(registry)

        self.logger.info("Switched account", puuid=short_puuid(target_puuid))
        return True

    async def remove_account(self, puuid: str) -> None:
        registry = self.get_accounts()
        if registry is None:
            self.logger.warning("No account registry found")
            return

        entry = registry.find(puuid)
        if entry is None:
            self.logger.warning("Account not found in registry", puuid=short_puuid(puuid))
            return

        registry.accounts.remove(entry)
        await self._delete_account_session(puuid)
        self.logger.info("Removed account", puuid=short_puuid(puuid))

        if registry.active_puuid == puuid:
            if not registry.accounts:
                await self.sessions.delete_session()
                self.cookies.delete(ACCOUNTS_COOKIE_NAME)
                self.logger.info("No accounts remaining, cleared all sessions")
                return

            next_account = registry.accounts[0]
            next_session = await self._load_account_session(next_account.puuid)
            if next_session is not None:
                await self.sessions.create_session(next_session)
                registry.active_puuid = next_account.puuid
                self.logger.info("Switched to next account", puuid=short_puuid(next_account.puuid))
            else:
                await self.sessions.delete_session()
                registry.active_puuid = ""
                self.logger.warning("Next account session not found, cleared active session")

        self._save_accounts(registry)

    def get_active_account(self) -> Optional[AccountEntry]:
        registry = self.get_accounts()
        if registry is None or not registry.active_puuid:
            return None
        return registry.find(registry.active_puuid)

    async def list_accounts(self) -> List[dict]:
        """Accounts with an ``isActive`` flag, seeding the registry from a pre-registry live session."""
        registry = self.get_accounts()

        if registry is None:
            session = await self.sessions.get_session()
            if session is not None:
                self.logger.info("Migrating existing session to multi-account registry")
                registry = await self.add_account(
                    AccountEntry(
                        puuid=session.puuid,
                        region=session.region,
                        game_name=session.game_name,
                        tag_line=session.tag_line,
                        added_at=session.created_at,
                    ),
                    SessionTokens.model_validate(session.model_dump()),
                )

        if registry is None:
            return []

        return [
            {**account.to_payload(), "isActive": account.puuid == registry.active_puuid}
            for account in registry.accounts
        ]
