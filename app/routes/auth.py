"""
auth.py
-------
Purpose:
    Token issuing for the employee records API.

Notes:
    - Accounts are a fixed demo set; there is no user registration.
    - Passwords are compared in constant time.
    - /test-credentials only answers in development.
"""

import hmac

from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.verify import auth_dependency, claims_to_user, create_access_token
from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.api.auth_request import LoginRequest
from app.models.api.auth_response import LoginResponse, UserInfo

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = get_logger(__name__)

DEMO_ACCOUNTS = {
    "admin@techhive.com": {
        "password": "Admin123!",
        "user": UserInfo(
            id="1",
            email="admin@techhive.com",
            first_name="Admin",
            last_name="User",
            roles=["Admin", "User"],
        ),
    },
    "user@techhive.com": {
        "password": "User123!",
        "user": UserInfo(
            id="2",
            email="user@techhive.com",
            first_name="Regular",
            last_name="User",
            roles=["User"],
        ),
    },
    "john.doe@company.com": {
        "password": "Password123!",
        "user": UserInfo(
            id="3",
            email="john.doe@company.com",
            first_name="John",
            last_name="Doe",
            roles=["User"],
        ),
    },
}


def authenticate(email: str, password: str) -> UserInfo | None:
    account = DEMO_ACCOUNTS.get(email.strip().lower())
    if account is None:
        # Same comparison cost whether or not the account exists
        hmac.compare_digest(password.encode(), b"\x00" * len(password.encode()))
        return None
    if not hmac.compare_digest(password.encode(), account["password"].encode()):
        return None
    return account["user"]


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    """
    Exchange demo credentials for a bearer token.

    Raises:
        400: Malformed body
        401: Invalid email or password
    """
    user = authenticate(body.email, body.password)
    if user is None:
        logger.warning("Login failed", email=body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token, expires_at = create_access_token(user)
    logger.info("Login succeeded", user_id=user.id)
    return LoginResponse(token=token, expires_at=expires_at, user=user)


@router.get("/validate", response_model=UserInfo)
async def validate(claims: dict = Depends(auth_dependency)):
    """Echo the identity carried by a valid token."""
    return claims_to_user(claims)


@router.get("/test-credentials")
async def test_credentials():
    if not settings.is_development():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    return {
        "message": "Demo accounts for development use only",
        "accounts": [
            {"email": email, "password": account["password"], "roles": account["user"].roles}
            for email, account in DEMO_ACCOUNTS.items()
        ],
    }


@router.get("/health")
async def auth_health():
    return {"status": "ok", "service": "auth"}
