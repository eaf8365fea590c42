# models/api/auth_request.py
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=6, description="Account password")
