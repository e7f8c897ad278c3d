"""
Login route for the admin console and the driver app.

Uses bcrypt for password hashing and JWT for session tokens. Logout is
client-side: the console drops its session object.
"""
import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetmon.config import get_settings
from fleetmon.database import get_session
from fleetmon.models import User
from fleetmon.schemas import LoginRequest, LoginResponse, UserInfo
from fleetmon.services.auth import create_access_token, verify_password

settings = get_settings()
logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_session),
):
    """
    Authenticate by email and password.
    Returns a bearer token plus the user's id, email and role.
    """
    email = credentials.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Login rejected", email=email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    role = (user.role or "DRIVER").upper()
    token = create_access_token(user.user_id, role, user.email)
    logger.info("Login accepted", user_id=user.user_id, role=role)

    return LoginResponse(
        token=token,
        expires_in=settings.jwt_expiry_hours * 3600,
        user=UserInfo(id=user.user_id, email=user.email, role=role),
    )
