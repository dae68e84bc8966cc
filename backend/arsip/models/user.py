"""User ORM — the minimal user directory the notification dispatcher reads."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from arsip.db.base import Base


class User(Base):
    """Application user (identity managed by the surrounding application)."""
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    nama: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    id_bidang_fkey: Mapped[int | None] = mapped_column(Integer, nullable=True)
