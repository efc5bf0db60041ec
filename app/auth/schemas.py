from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Role


class AccountCapabilities(BaseModel):
    """What an account may do at login time. Expiry and locking are not modelled, so they are always granted."""

    model_config = ConfigDict(frozen=True)

    enabled: bool
    account_non_expired: bool = True
    account_non_locked: bool = True
    credentials_non_expired: bool = True
    authorities: List[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=1)


class UserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    role: Role


class Authentication(BaseModel):
    """Result of a successful authentication."""

    user: UserInfo
    authorities: List[str]
    capabilities: AccountCapabilities
    authenticated_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
    capabilities: AccountCapabilities
    issued_at: datetime
