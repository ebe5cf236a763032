"""
Seed script: creates the default admin user and the default categories.
Run after `alembic upgrade head`, from the project root: python -m scripts.seed
"""
import asyncio
import sys
import os

# Ensure the project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from vertragsdb.config import settings
from vertragsdb.database import AsyncSessionLocal, engine
from vertragsdb.models.category import Category
from vertragsdb.models.user import Role, User
from vertragsdb.services.auth_service import hash_password


async def seed():
    async with AsyncSessionLocal() as db:
        created_admin = False
        result = await db.execute(
            select(User).where(User.username == settings.DEFAULT_ADMIN_USERNAME)
        )
        if result.scalar_one_or_none() is None:
            db.add(
                User(
                    username=settings.DEFAULT_ADMIN_USERNAME,
                    password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                    role=Role.ADMIN.value,
                )
            )
            created_admin = True

        existing = set((await db.execute(select(Category.name))).scalars().all())
        new_categories = [n for n in settings.default_categories_list if n not in existing]
        db.add_all([Category(name=name) for name in new_categories])

        await db.commit()

    await engine.dispose()

    if created_admin:
        print(f"Admin user '{settings.DEFAULT_ADMIN_USERNAME}' created.")
        if settings.DEFAULT_ADMIN_PASSWORD == "admin":
            print("  WARNING: default password in use, change it after first login.")
    else:
        print("Admin user already exists. Skipping.")
    print(f"Categories added: {len(new_categories)}")


if __name__ == "__main__":
    asyncio.run(seed())
