"""Initial schema — record store, transfer process, memo, links, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lokasi_penyimpanan",
        sa.Column("id_lokasi", UUID(as_uuid=True), primary_key=True),
        sa.Column("id_bidang_fkey", sa.Integer, nullable=False),
        sa.Column("no_filing_cabinet", sa.String(20), nullable=True),
        sa.Column("no_laci", sa.String(20), nullable=True),
        sa.Column("no_folder", sa.String(20), nullable=True),
    )
    op.create_index(
        "ix_lokasi_penyimpanan_id_bidang_fkey", "lokasi_penyimpanan", ["id_bidang_fkey"],
    )

    op.create_table(
        "arsip_aktif",
        sa.Column("id_arsip_aktif", UUID(as_uuid=True), primary_key=True),
        sa.Column("nomor_berkas", sa.Integer, nullable=False),
        sa.Column("kode_klasifikasi", sa.String(50), nullable=False),
        sa.Column("uraian_informasi", sa.Text, nullable=True),
        sa.Column("kurun_waktu", sa.String(50), nullable=True),
        sa.Column("jumlah", sa.Integer, nullable=True),
        sa.Column("keterangan", sa.Text, nullable=True),
        sa.Column("tingkat_perkembangan", sa.String(50), nullable=True),
        sa.Column("media_simpan", sa.String(50), nullable=True),
        sa.Column("jangka_simpan_mulai", sa.Date, nullable=True),
        sa.Column("jangka_simpan_berakhir", sa.Date, nullable=True),
        sa.Column("jenis_arsip", sa.String(200), nullable=True),
        sa.Column("masa_retensi_inaktif", sa.Integer, nullable=True),
        sa.Column("nasib_akhir", sa.String(50), nullable=True),
        sa.Column("status_persetujuan", sa.String(20), nullable=False, server_default="Menunggu"),
        sa.Column("file_url", sa.Text, nullable=True),
        sa.Column(
            "lokasi_penyimpanan_fkey", UUID(as_uuid=True),
            sa.ForeignKey("lokasi_penyimpanan.id_lokasi"), nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "klasifikasi_arsip",
        sa.Column("kode_klasifikasi", sa.String(50), primary_key=True),
        sa.Column("kode_klasifikasi_old", sa.String(50), nullable=True),
        sa.Column("label", sa.String(200), nullable=True),
        sa.Column("aktif", sa.Integer, nullable=True),
        sa.Column("inaktif", sa.Integer, nullable=True),
        sa.Column("nasib_akhir", sa.String(50), nullable=True),
    )
    op.create_index(
        "ix_klasifikasi_arsip_kode_klasifikasi_old", "klasifikasi_arsip", ["kode_klasifikasi_old"],
    )

    op.create_table(
        "pemindahan_process",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("id_bidang_fkey", sa.Integer, nullable=True),
        sa.Column("current_step", sa.Integer, nullable=False, server_default="1"),
        sa.Column("selected_arsip_ids", sa.JSON, nullable=False),
        sa.Column("berita_acara", sa.JSON, nullable=True),
        sa.Column("pemindahan_info", sa.JSON, nullable=True),
        sa.Column("approval_status", sa.JSON, nullable=True),
        sa.Column("process_status", sa.JSON, nullable=True),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("approval_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_pemindahan_process_user_id", "pemindahan_process", ["user_id"])

    op.create_table(
        "berita_acara_pemindahan",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("nomor_berita_acara", sa.String(100), nullable=False, unique=True),
        sa.Column("tanggal_berita_acara", sa.Date, nullable=False),
        sa.Column("dasar", sa.Text, nullable=True),
        sa.Column("keterangan", sa.Text, nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column(
            "id_pemindahan_process_fkey", UUID(as_uuid=True),
            sa.ForeignKey("pemindahan_process.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("jumlah_arsip", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="Menunggu"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "arsip_inaktif",
        sa.Column("id_arsip_inaktif", UUID(as_uuid=True), primary_key=True),
        sa.Column("nomor_berkas", sa.Integer, nullable=False),
        sa.Column("kode_klasifikasi", sa.String(50), nullable=True),
        sa.Column("jenis_arsip", sa.String(200), nullable=False),
        sa.Column("uraian_informasi", sa.Text, nullable=True),
        sa.Column("kurun_waktu", sa.String(50), nullable=True),
        sa.Column("tingkat_perkembangan", sa.String(50), nullable=True),
        sa.Column("jumlah", sa.Integer, nullable=True),
        sa.Column("keterangan", sa.Text, nullable=True),
        sa.Column("inaktif_mulai", sa.Date, nullable=True),
        sa.Column("inaktif_berakhir", sa.Date, nullable=True),
        sa.Column("masa_retensi", sa.Integer, nullable=False),
        sa.Column("nasib_akhir", sa.String(50), nullable=False),
        sa.Column("nomor_definitif_folder_dan_boks", sa.String(100), nullable=False),
        sa.Column("lokasi_simpan", sa.String(200), nullable=False),
        sa.Column("kategori_arsip", sa.String(100), nullable=False),
        sa.Column(
            "id_arsip_aktif", UUID(as_uuid=True),
            sa.ForeignKey("arsip_aktif.id_arsip_aktif"), nullable=False,
        ),
        sa.Column(
            "id_berita_acara", UUID(as_uuid=True),
            sa.ForeignKey("berita_acara_pemindahan.id"), nullable=False,
        ),
        sa.Column("tanggal_pindah", sa.Date, nullable=False),
        sa.Column("file_url", sa.Text, nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status_persetujuan", sa.String(20), nullable=False, server_default="Menunggu"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_arsip_inaktif_id_berita_acara", "arsip_inaktif", ["id_berita_acara"])

    op.create_table(
        "pemindahan_arsip_link",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "id_arsip_aktif_fkey", UUID(as_uuid=True),
            sa.ForeignKey("arsip_aktif.id_arsip_aktif"), nullable=False,
        ),
        sa.Column(
            "id_arsip_inaktif_fkey", UUID(as_uuid=True),
            sa.ForeignKey("arsip_inaktif.id_arsip_inaktif"), nullable=False,
        ),
        sa.Column(
            "id_pemindahan_process_fkey", UUID(as_uuid=True),
            sa.ForeignKey("pemindahan_process.id"), nullable=False,
        ),
    )
    op.create_index(
        "ix_pemindahan_arsip_link_id_arsip_aktif_fkey", "pemindahan_arsip_link",
        ["id_arsip_aktif_fkey"], unique=True,
    )

    op.create_table(
        "users",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("nama", sa.String(200), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("id_bidang_fkey", sa.Integer, nullable=True),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("related_entity", sa.String(50), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("users")
    op.drop_table("pemindahan_arsip_link")
    op.drop_table("arsip_inaktif")
    op.drop_table("berita_acara_pemindahan")
    op.drop_table("pemindahan_process")
    op.drop_table("klasifikasi_arsip")
    op.drop_table("arsip_aktif")
    op.drop_table("lokasi_penyimpanan")
