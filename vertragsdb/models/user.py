from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Index
from sqlalchemy.orm import Mapped, mapped_column

from vertragsdb.database import Base, utcnow


class Role(str, Enum):
    """Capability tier attached to a verified identity."""

    ADMIN = "admin"    # elevated: may mutate and trigger recalculation
    VIEWER = "viewer"  # standard: read only


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'viewer')", name="chk_user_role"),
        Index("idx_users_role", "role"),
    )
