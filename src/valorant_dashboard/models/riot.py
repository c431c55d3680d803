"""Upstream Riot auth payloads and the tagged results of an authentication attempt."""
from enum import Enum
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class MultifactorInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: Optional[str] = None
    method: Optional[str] = None
    methods: Optional[List[str]] = None
    multi_factor_code_length: Optional[int] = Field(default=None, alias="multiFactorCodeLength")


class AuthResponseParameters(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uri: Optional[str] = None


class AuthResponseBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mode: Optional[str] = None
    parameters: Optional[AuthResponseParameters] = None


class AuthResponse(BaseModel):
    """Discriminated by ``type``: ``response``, ``multifactor`` or ``error``."""
    model_config = ConfigDict(extra="ignore")

    type: str
    response: Optional[AuthResponseBody] = None
    multifactor: Optional[MultifactorInfo] = None
    error: Optional[str] = None
    country: Optional[str] = None

    @property
    def redirect_uri(self) -> Optional[str]:
        if self.response and self.response.parameters:
            return self.response.parameters.uri
        return None


class EntitlementsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entitlements_token: str


class RiotAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game_name: Optional[str] = None
    tag_line: Optional[str] = None


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sub: str  # PUUID
    country: Optional[str] = None
    affinity: Optional[Dict[str, str]] = None
    acct: Optional[RiotAccount] = None


class RiotSessionCookies(BaseModel):
    """The four cookies needed for SSID re-auth, plus the string they were read from."""
    raw: str = ""
    ssid: Optional[str] = None
    clid: Optional[str] = None
    csid: Optional[str] = None
    tdid: Optional[str] = None


class AuthTokens(BaseModel):
    access_token: str
    id_token: str
    entitlements_token: str
    puuid: str
    region: str
    game_name: Optional[str] = None
    tag_line: Optional[str] = None
    country: Optional[str] = None


class AuthSuccess(BaseModel):
    success: Literal[True] = True
    tokens: AuthTokens
    riot_cookies: Optional[str] = None


class MultifactorRequired(BaseModel):
    success: Literal[False] = False
    type: Literal["multifactor"] = "multifactor"
    cookie: str
    multifactor: Optional[MultifactorInfo] = None


class AuthFailure(BaseModel):
    success: Literal[False] = False
    error: str


class RefreshSuccess(BaseModel):
    success: Literal[True] = True
    tokens: AuthTokens
    riot_cookies: str
    named_cookies: RiotSessionCookies


LoginResult = Union[AuthSuccess, MultifactorRequired, AuthFailure]
MfaResult = Union[AuthSuccess, AuthFailure]
RefreshResult = Union[RefreshSuccess, AuthFailure]


class AuthState(str, Enum):
    INIT = "init"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    MFA_REQUIRED = "mfa_required"
    MFA_SUBMITTED = "mfa_submitted"
    TOKENS_EXTRACTED = "tokens_extracted"
    ENTITLEMENTS_RESOLVED = "entitlements_resolved"
    USERINFO_RESOLVED = "userinfo_resolved"
    COMPLETE = "complete"
    FAILED = "failed"
