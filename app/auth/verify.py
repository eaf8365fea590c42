"""
verify.py
---------
Purpose:
    Issue and verify HS256 access tokens with PyJWT.

Notes:
    - Signing key, issuer, audience, lifetime and clock skew come from
      settings.get_jwt_config().
    - Provides `auth_dependency` for protected routes. It also records the
      caller on request.state so the audit middleware can attribute entries.
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.infrastructure.observability.logging import bind_request_context, get_logger
from app.models.api.auth_response import UserInfo

logger = get_logger(__name__)

ALGORITHM = "HS256"

_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user: UserInfo, now: datetime | None = None) -> tuple[str, datetime]:
    """Sign a token for `user`. Returns (token, expires_at)."""
    config = settings.get_jwt_config()
    now = now or datetime.now(UTC)
    expires_at = now + timedelta(minutes=config["expiration_minutes"])

    claims = {
        "sub": user.id,
        "email": user.email,
        "given_name": user.first_name,
        "family_name": user.last_name,
        "roles": list(user.roles),
        "jti": str(uuid.uuid4()),
        "iat": int(now.timestamp()),
        "exp": expires_at,
        "iss": config["issuer"],
        "aud": config["audience"],
    }
    token = jwt.encode(claims, config["secret_key"], algorithm=ALGORITHM)
    return token, expires_at


def verify_jwt(token: str) -> dict:
    config = settings.get_jwt_config()
    try:
        return jwt.decode(
            token,
            config["secret_key"],
            algorithms=[ALGORITHM],
            audience=config["audience"],
            issuer=config["issuer"],
            leeway=config["leeway"],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise _unauthorized("Authentication token has expired") from e
    except jwt.PyJWTError as e:
        raise _unauthorized(f"Invalid authentication token: {e}") from e


def claims_to_user(claims: dict) -> UserInfo:
    return UserInfo(
        id=str(claims["sub"]),
        email=claims.get("email", ""),
        first_name=claims.get("given_name", ""),
        last_name=claims.get("family_name", ""),
        roles=list(claims.get("roles", [])),
    )


def auth_dependency(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> dict:
    if credentials is None or not credentials.credentials:
        logger.warning("Missing bearer token", path=request.url.path)
        raise _unauthorized("Authorization token is required")

    try:
        claims = verify_jwt(credentials.credentials)
    except HTTPException as e:
        logger.warning("Token rejected", path=request.url.path, reason=e.detail)
        raise

    request.state.user_id = str(claims["sub"])
    request.state.user_email = claims.get("email")
    bind_request_context(user_id=request.state.user_id)
    return claims
