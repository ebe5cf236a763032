"""add categories table, seeded with defaults and names already in use

Revision ID: d07b5e93a2c8
Revises: 8c4e2a61d5f3
Create Date: 2026-02-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "d07b5e93a2c8"
down_revision = "8c4e2a61d5f3"
branch_labels = None
depends_on = None

DEFAULT_CATEGORIES = ("IT", "Gebäude", "Versicherungen")


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # INSERT ... WHERE NOT EXISTS keeps both seed steps safe to repeat.
    insert_default = sa.text(
        "INSERT INTO categories (name) "
        "SELECT CAST(:name AS VARCHAR(100)) "
        "WHERE NOT EXISTS (SELECT 1 FROM categories WHERE name = :name)"
    ).bindparams(sa.bindparam("name", type_=sa.String(100)))
    for name in DEFAULT_CATEGORIES:
        op.execute(insert_default.bindparams(name=name))

    op.execute(
        "INSERT INTO categories (name) "
        "SELECT DISTINCT c.category FROM contracts c "
        "WHERE c.category <> '' "
        "AND NOT EXISTS (SELECT 1 FROM categories k WHERE k.name = c.category)"
    )


def downgrade() -> None:
    op.drop_table("categories")
