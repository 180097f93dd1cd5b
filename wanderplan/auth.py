import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, SESSION_COOKIE_NAME
from .database import get_db
from .models import User
from .security_utils import create_jwt_token, verify_jwt_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header falls back to the session cookie
security = HTTPBearer(auto_error=False)


def create_session_token(user: User) -> str:
    """Issue the session JWT for a user; `sub` holds the user id"""
    return create_jwt_token(
        {"sub": user.id, "email": user.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE_NAME)


def _resolve_user(db: Session, token: str) -> Optional[User]:
    token_parts = token.split(".")
    if len(token_parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(token_parts)} parts")
        return None

    payload = verify_jwt_token(token)
    if not payload or not payload.get("sub"):
        return None

    return db.query(User).filter(User.id == payload["sub"]).first()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the Bearer token or the session cookie.
    Raises 401 when no valid session is present.
    """
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    user = _resolve_user(db, token)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Same as get_current_user but returns None for anonymous requests"""
    token = _extract_token(request, credentials)
    if not token:
        return None
    return _resolve_user(db, token)
