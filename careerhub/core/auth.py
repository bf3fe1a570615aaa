"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes

Every authorization failure surfaces as the same 401 "Unauthorized"
so callers cannot tell a missing token from a wrong role.
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from careerhub.core.config import get_settings
from careerhub.core.exceptions import AuthorizationError
from careerhub.db.postgres import get_db_session, fetch_one

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (errors are raised by us, uniformly)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def _load_user(token: str) -> Optional[dict]:
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None

    with get_db_session() as db:
        user = fetch_one(
            db,
            "SELECT user_id, email, name, role, company_id, is_active FROM users WHERE user_id = :id",
            {"id": int(payload["sub"])}
        )

    if not user or not user["is_active"]:
        return None
    user.pop("is_active")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthorizationError()
    user = _load_user(credentials.credentials)
    if user is None:
        raise AuthorizationError()
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[dict]:
    """Dependency - current user when a valid token is sent, otherwise None."""
    if credentials is None:
        return None
    return _load_user(credentials.credentials)


async def require_student(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != "STUDENT":
        raise AuthorizationError()
    return user


async def require_employer(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != "EMPLOYER":
        raise AuthorizationError()
    return user


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != "ADMIN":
        raise AuthorizationError()
    return user
