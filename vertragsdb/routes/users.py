from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.database import get_db
from vertragsdb.middleware.auth import get_current_user
from vertragsdb.middleware.authorization import Role, check_self_deletion, require_admin
from vertragsdb.models.user import User
from vertragsdb.schemas.auth import UserCreateRequest, UserResponse, UserUpdateRequest
from vertragsdb.services.auth_service import hash_password

logger = structlog.get_logger()
router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _count_other_admins(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(User.id)).where(User.role == Role.ADMIN.value, User.id != user_id)
    )
    return result.scalar() or 0


async def _ensure_username_free(db: AsyncSession, username: str, user_id: int = 0):
    existing = await db.execute(
        select(User.id).where(User.username == username, User.id != user_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="Username already taken")


@router.get("", response_model=list[UserResponse])
async def list_users(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.username))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_username_free(db, body.username)

    user = User(
        username=body.username,
        password_hash=hash_password(body.password),
        role=body.role.value,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("user_created", user_id=user.id, role=user.role, actor_id=current_user["user_id"])
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)

    # The last admin must stay an admin
    if body.role != Role.ADMIN and await _count_other_admins(db, user_id) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "USER_LAST_ADMIN",
                    "message": "The last admin cannot be demoted",
                }
            },
        )

    await _ensure_username_free(db, body.username, user_id)

    user.username = body.username
    user.role = body.role.value
    if body.password:
        user.password_hash = hash_password(body.password)

    await db.flush()
    await db.refresh(user)
    logger.info("user_updated", user_id=user.id, role=user.role, actor_id=current_user["user_id"])
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    check_self_deletion(current_user["user_id"], user_id)
    user = await _get_user_or_404(db, user_id)

    if user.role == Role.ADMIN.value and await _count_other_admins(db, user_id) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "USER_LAST_ADMIN",
                    "message": "The last admin cannot be deleted",
                }
            },
        )

    await db.delete(user)
    await db.flush()
    logger.info("user_deleted", user_id=user_id, actor_id=current_user["user_id"])
