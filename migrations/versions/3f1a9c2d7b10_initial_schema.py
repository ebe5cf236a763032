"""initial schema: users, contracts, documents

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-01-12 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "3f1a9c2d7b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.CheckConstraint("role IN ('admin', 'viewer')", name="chk_user_role"),
    )
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_number", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("conditions", sa.Text(), nullable=True),
        sa.Column("notice_period", sa.Integer(), nullable=True),
        sa.Column("minimum_term", sa.Date(), nullable=True),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_until", sa.Date(), nullable=True),
        sa.Column("partner", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("contract_type", sa.String(20), nullable=False),
        sa.Column("framework_contract_id", sa.Integer(), nullable=True),
        sa.Column("is_terminated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("terminated_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("contract_number"),
        sa.ForeignKeyConstraint(["framework_contract_id"], ["contracts.id"]),
        sa.CheckConstraint(
            "contract_type IN ('framework', 'individual')",
            name="chk_contract_type",
        ),
    )
    op.create_index("idx_contracts_category", "contracts", ["category"])
    op.create_index("idx_contracts_terminated", "contracts", ["is_terminated"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("file_key", sa.String(512), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_documents_contract", "documents", ["contract_id"])


def downgrade() -> None:
    op.drop_index("idx_documents_contract", table_name="documents")
    op.drop_table("documents")
    op.drop_index("idx_contracts_terminated", table_name="contracts")
    op.drop_index("idx_contracts_category", table_name="contracts")
    op.drop_table("contracts")
    op.drop_index("idx_users_role", table_name="users")
    op.drop_table("users")
