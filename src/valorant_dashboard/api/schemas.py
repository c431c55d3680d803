from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    type: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    code: Optional[str] = None
    cookie: Optional[str] = None
    url: Optional[str] = None


class AccountSummary(BaseModel):
    puuid: str
    region: str


class LoginResponse(BaseModel):
    success: Literal[True] = True
    data: AccountSummary


class MultifactorResponse(BaseModel):
    success: Literal[False] = False
    requiresMfa: Literal[True] = True
    cookie: str
    multifactor: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class SwitchAccountRequest(BaseModel):
    puuid: Optional[str] = None


class ActiveAccount(BaseModel):
    puuid: str
    region: str
    gameName: Optional[str] = None
    tagLine: Optional[str] = None


class SwitchAccountResponse(BaseModel):
    success: Literal[True] = True
    message: str
    activeAccount: Optional[ActiveAccount] = None


class AccountListResponse(BaseModel):
    accounts: List[Dict[str, Any]]


class SessionSummaryResponse(BaseModel):
    puuid: str
    region: str
    gameName: Optional[str] = None
    tagLine: Optional[str] = None
    country: Optional[str] = None
    createdAt: int
