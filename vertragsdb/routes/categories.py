from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.database import get_db
from vertragsdb.middleware.auth import get_current_user
from vertragsdb.middleware.authorization import require_admin
from vertragsdb.models.category import Category
from vertragsdb.models.contract import Contract

logger = structlog.get_logger()
router = APIRouter()


class CategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name must not be empty")
        return v


class CategoryResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


async def _get_category_or_404(db: AsyncSession, category_id: int) -> Category:
    result = await db.execute(select(Category).where(Category.id == category_id))
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


async def _ensure_name_free(db: AsyncSession, name: str, category_id: int = 0):
    existing = await db.execute(
        select(Category.id).where(Category.name == name, Category.id != category_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="Category already exists")


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Category).order_by(Category.name))
    return [CategoryResponse.model_validate(c) for c in result.scalars().all()]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryRequest,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_name_free(db, body.name)
    category = Category(name=body.name)
    db.add(category)
    await db.flush()
    await db.refresh(category)
    logger.info("category_created", category_id=category.id, name=category.name)
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def rename_category(
    category_id: int,
    body: CategoryRequest,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Rename a category and every contract filed under the old name."""
    category = await _get_category_or_404(db, category_id)
    await _ensure_name_free(db, body.name, category_id)

    old_name = category.name
    category.name = body.name
    result = await db.execute(
        update(Contract).where(Contract.category == old_name).values(category=body.name)
    )
    await db.flush()

    logger.info(
        "category_renamed",
        category_id=category_id,
        old_name=old_name,
        new_name=body.name,
        contracts_updated=result.rowcount,
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await _get_category_or_404(db, category_id)

    in_use = (
        await db.execute(
            select(func.count(Contract.id)).where(Contract.category == category.name)
        )
    ).scalar() or 0
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category is used by {in_use} contract(s)",
        )

    await db.delete(category)
    await db.flush()
    logger.info("category_deleted", category_id=category_id)
