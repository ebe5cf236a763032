from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vertragsdb.database import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
