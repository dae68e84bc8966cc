"""InactiveRecord ORM — created only by the migration executor.

Invariants:
    - nomor_berkas is the new 1..N number within the migrated batch
    - Immutable after insert except status_persetujuan (external verification)
    - id_arsip_aktif points back to the source active record
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arsip.core.domain_types import RecordApprovalStatus
from arsip.core.retention import format_period
from arsip.db.base import Base


class InactiveRecord(Base):
    """Inactive archive record."""
    __tablename__ = "arsip_inaktif"

    id_arsip_inaktif: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    nomor_berkas: Mapped[int] = mapped_column(Integer, nullable=False)
    kode_klasifikasi: Mapped[str | None] = mapped_column(String(50), nullable=True)
    jenis_arsip: Mapped[str] = mapped_column(String(200), nullable=False)
    uraian_informasi: Mapped[str | None] = mapped_column(Text, nullable=True)
    kurun_waktu: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tingkat_perkembangan: Mapped[str | None] = mapped_column(String(50), nullable=True)
    jumlah: Mapped[int | None] = mapped_column(Integer, nullable=True)
    keterangan: Mapped[str | None] = mapped_column(Text, nullable=True)
    inaktif_mulai: Mapped[date | None] = mapped_column(Date, nullable=True)
    inaktif_berakhir: Mapped[date | None] = mapped_column(Date, nullable=True)
    masa_retensi: Mapped[int] = mapped_column(Integer, nullable=False)
    nasib_akhir: Mapped[str] = mapped_column(String(50), nullable=False)
    nomor_definitif_folder_dan_boks: Mapped[str] = mapped_column(
        String(100), nullable=False,
    )
    lokasi_simpan: Mapped[str] = mapped_column(String(200), nullable=False)
    kategori_arsip: Mapped[str] = mapped_column(String(100), nullable=False)
    id_arsip_aktif: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("arsip_aktif.id_arsip_aktif"),
        nullable=False,
    )
    id_berita_acara: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("berita_acara_pemindahan.id"),
        nullable=False, index=True,
    )
    tanggal_pindah: Mapped[date] = mapped_column(Date, nullable=False)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status_persetujuan: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecordApprovalStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def jangka_simpan(self) -> str:
        """Inactive period for display."""
        return format_period(self.inaktif_mulai, self.inaktif_berakhir)
