from typing import Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from mindyamsanzi.core.config import Settings
from mindyamsanzi.core.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    is_admin: bool = False


def decode_access_token(token: str, settings: Settings) -> CurrentUser:
    """Verify a token issued by the auth provider and return its subject"""
    if not settings.JWT_SECRET:
        raise AuthenticationError("Token verification is not configured")

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise AuthenticationError("Could not validate credentials")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Could not validate credentials")

    # some clients append a session suffix such as ":1" to the subject
    subject = str(subject).split(":")[0]

    app_metadata = payload.get("app_metadata") or {}
    role = app_metadata.get("role") or payload.get("role")

    return CurrentUser(
        id=subject,
        email=payload.get("email"),
        role=role,
        is_admin=role == settings.ADMIN_ROLE,
    )


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """Return the caller when a bearer token is sent, None for anonymous callers"""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials, request.app.state.settings)


async def get_current_user(
    user: Optional[CurrentUser] = Depends(get_optional_user),
) -> CurrentUser:
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


async def require_admin(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not user.is_admin:
        raise AuthorizationError("Not enough permissions")
    return user
