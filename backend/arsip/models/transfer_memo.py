"""TransferMemo ORM — the uniquely numbered transfer memo (berita acara).

Invariants:
    - nomor_berita_acara is UNIQUE: the natural key of a completed transfer
    - status moves Menunggu -> Selesai only after a successful migration
    - An orphaned memo (migration failed after creation) is kept: it blocks
      reuse of the number and is what the idempotency lookup finds on retry
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arsip.core.domain_types import MemoStatus
from arsip.db.base import Base


class TransferMemo(Base):
    """Transfer memo record."""
    __tablename__ = "berita_acara_pemindahan"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    nomor_berita_acara: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
    tanggal_berita_acara: Mapped[date] = mapped_column(Date, nullable=False)
    dasar: Mapped[str | None] = mapped_column(Text, nullable=True)
    keterangan: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    id_pemindahan_process_fkey: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pemindahan_process.id", ondelete="SET NULL"),
        nullable=True,
    )
    jumlah_arsip: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MemoStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
