from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.database import get_db
from vertragsdb.models.user import User
from vertragsdb.schemas.auth import LoginRequest, LoginResponse, UserResponse
from vertragsdb.services.auth_service import (
    create_access_token,
    get_token_signer,
    verify_password,
)
from vertragsdb.middleware.auth import get_current_user

logger = structlog.get_logger()

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate user and return a bearer token."""
    result = await db.execute(select(User).where(User.username == body.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("login_failed", username=body.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "AUTH_INVALID_CREDENTIALS",
                    "message": "Invalid credentials",
                }
            },
        )

    token = create_access_token(user_id=user.id, username=user.username, role=user.role)
    logger.info("user_logged_in", user_id=user.id, role=user.role)

    return LoginResponse(
        token=token,
        token_type="Bearer",
        expires_in=get_token_signer().expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)
