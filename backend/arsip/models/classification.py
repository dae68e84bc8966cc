"""Classification ORM — retention schedule per classification code.

Invariants:
    - kode_klasifikasi (current code) is the primary key
    - kode_klasifikasi_old is a legacy alias; lookups through it always
      report the current code
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from arsip.db.base import Base


class Classification(Base):
    """Classification schedule row."""
    __tablename__ = "klasifikasi_arsip"

    kode_klasifikasi: Mapped[str] = mapped_column(String(50), primary_key=True)
    kode_klasifikasi_old: Mapped[str | None] = mapped_column(
        String(50), nullable=True, index=True,
    )
    label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    aktif: Mapped[int | None] = mapped_column(Integer, nullable=True)
    inaktif: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nasib_akhir: Mapped[str | None] = mapped_column(String(50), nullable=True)
