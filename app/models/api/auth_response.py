# models/api/auth_response.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class UserInfo(BaseModel):
    """Identity carried in (and recovered from) an access token."""

    id: str = Field(..., description="Account identifier (JWT sub claim)")
    email: str = Field(..., description="Account email address")
    first_name: str = Field(default="", description="Given name")
    last_name: str = Field(default="", description="Family name")
    roles: list[str] = Field(default_factory=list, description="Roles granted to the account")


class LoginResponse(BaseModel):
    """Response for POST /api/auth/login."""

    token: str = Field(..., description="Signed JWT access token")
    token_type: Literal["Bearer"] = "Bearer"
    expires_at: datetime = Field(..., description="When the token stops being accepted")
    user: UserInfo
