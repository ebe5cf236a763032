"""add cancellation scheduling columns to contracts

Revision ID: 8c4e2a61d5f3
Revises: 3f1a9c2d7b10
Create Date: 2026-02-03 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "8c4e2a61d5f3"
down_revision = "3f1a9c2d7b10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("contracts") as batch_op:
        batch_op.add_column(sa.Column("term_months", sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column("cancellation_date", sa.Date(), nullable=True))
        batch_op.add_column(sa.Column("cancellation_action_date", sa.Date(), nullable=True))
    op.create_index(
        "idx_contracts_action_date", "contracts", ["cancellation_action_date"]
    )


def downgrade() -> None:
    op.drop_index("idx_contracts_action_date", table_name="contracts")
    with op.batch_alter_table("contracts") as batch_op:
        batch_op.drop_column("cancellation_action_date")
        batch_op.drop_column("cancellation_date")
        batch_op.drop_column("term_months")
