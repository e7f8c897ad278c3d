"""
Centralized authentication and authorization module.

Provides:
- hash_password() / verify_password(): bcrypt credential handling
- create_access_token(): JWT session token issued at login
- get_auth_info(): resolve the caller from the Authorization header
- require_role(): FastAPI dependency for route-level RBAC

Roles are not hierarchical: admin routes reject drivers and driver routes
reject admins.
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Header, HTTPException

from fleetmon.config import get_settings

settings = get_settings()

JWT_ALGORITHM = "HS256"


class Role(str, Enum):
    ADMIN = "ADMIN"
    DRIVER = "DRIVER"


class AuthInfo:
    """
    Authentication context for a request.
    Populated by auth dependencies.
    """
    def __init__(self, user_id: str, role: Role, email: Optional[str] = None):
        self.user_id = user_id
        self.role = role
        self.email = email


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        return False


def create_access_token(user_id: str, role: str, email: Optional[str] = None) -> str:
    """Create a JWT session token for a logged-in user."""
    now = datetime.utcnow()
    payload = {
        "sub": user_id,
        "role": role,
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expiry_hours),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[AuthInfo]:
    """Return AuthInfo for a valid token, None for expired or invalid ones."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("sub")
    try:
        role = Role(str(payload.get("role", "")).upper())
    except ValueError:
        return None
    if not user_id:
        return None
    return AuthInfo(user_id=user_id, role=role, email=payload.get("email"))


async def get_auth_info(
    authorization: Optional[str] = Header(None),
) -> AuthInfo:
    """
    Extract and validate the bearer token.

    Raises 401 when the header is missing or the token does not verify.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    auth = decode_access_token(authorization[7:])
    if auth is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth


def require_role(role: Role):
    """
    FastAPI dependency factory that requires an exact role.

    Usage:
        @router.get("/admin/iot/devices")
        async def list_devices(auth: AuthInfo = Depends(require_role(Role.ADMIN))):
            ...

    Raises 401 if no auth, 403 if the role does not match.
    """
    async def dependency(auth: AuthInfo = Depends(get_auth_info)) -> AuthInfo:
        if auth.role != role:
            raise HTTPException(
                status_code=403,
                detail="Admins only" if role == Role.ADMIN else "Drivers only",
            )
        return auth

    return dependency


require_admin = require_role(Role.ADMIN)
require_driver = require_role(Role.DRIVER)
