"""ActiveRecord ORM — an archive item under active retention.

Invariants:
    - Read-only to the transfer workflow (created by the intake workflow)
    - Never deleted by the transfer workflow
    - "Already transferred" is NOT a column: it is the presence of a
      pemindahan_arsip_link row for this record
    - The active period is two calendar dates; display form is
      "DD-MM-YYYY s.d. DD-MM-YYYY"

Design Decisions:
    - jenis_arsip / masa_retensi_inaktif / nasib_akhir are intake-time values:
      the last fallback layer when classification lookup misses
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from arsip.core.domain_types import RecordApprovalStatus
from arsip.core.retention import format_period
from arsip.db.base import Base


class ActiveRecord(Base):
    """Active archive record."""
    __tablename__ = "arsip_aktif"

    id_arsip_aktif: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    nomor_berkas: Mapped[int] = mapped_column(Integer, nullable=False)
    kode_klasifikasi: Mapped[str] = mapped_column(String(50), nullable=False)
    uraian_informasi: Mapped[str | None] = mapped_column(Text, nullable=True)
    kurun_waktu: Mapped[str | None] = mapped_column(String(50), nullable=True)
    jumlah: Mapped[int | None] = mapped_column(Integer, nullable=True)
    keterangan: Mapped[str | None] = mapped_column(Text, nullable=True)
    tingkat_perkembangan: Mapped[str | None] = mapped_column(String(50), nullable=True)
    media_simpan: Mapped[str | None] = mapped_column(String(50), nullable=True)
    jangka_simpan_mulai: Mapped[date | None] = mapped_column(Date, nullable=True)
    jangka_simpan_berakhir: Mapped[date | None] = mapped_column(Date, nullable=True)
    jenis_arsip: Mapped[str | None] = mapped_column(String(200), nullable=True)
    masa_retensi_inaktif: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nasib_akhir: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status_persetujuan: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecordApprovalStatus.PENDING.value,
    )
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    lokasi_penyimpanan_fkey: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("lokasi_penyimpanan.id_lokasi"),
        nullable=False,
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    lokasi: Mapped["StorageLocation"] = relationship(
        "StorageLocation", lazy="selectin",
    )

    @property
    def jangka_simpan(self) -> str:
        """Active period for display."""
        return format_period(self.jangka_simpan_mulai, self.jangka_simpan_berakhir)
