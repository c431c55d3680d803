import time
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


class _CamelModel(BaseModel):
    # Persisted and signed payloads use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class SessionData(_CamelModel):
    """Durable per-account session. ``created_at`` (epoch ms) is the refresh clock."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    access_token: str
    entitlements_token: str
    puuid: str
    region: str
    id_token: Optional[str] = None
    game_name: Optional[str] = None
    tag_line: Optional[str] = None
    country: Optional[str] = None
    riot_cookies: Optional[str] = None
    created_at: int = 0


class AccountEntry(_CamelModel):
    puuid: str
    region: str
    game_name: Optional[str] = None
    tag_line: Optional[str] = None
    added_at: int


class AccountsData(_CamelModel):
    """Account registry. Insertion order is recency, oldest first."""
    accounts: List[AccountEntry]
    active_puuid: str = ""

    def find(self, puuid: str) -> Optional[AccountEntry]:
        for account in self.accounts:
            if account.puuid == puuid:
                return account
        return None


class SessionTokens(_CamelModel):
    """Tokens handed to the account registry when an account is added."""
    access_token: str
    entitlements_token: str
    puuid: str
    region: str
    id_token: Optional[str] = None
    game_name: Optional[str] = None
    tag_line: Optional[str] = None
    country: Optional[str] = None
    riot_cookies: Optional[str] = None
