"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Core functions read records through these structural types, never ORM classes
    - Implementations provided by shell (ORM models, dispatcher)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves
"""

from datetime import date
from typing import Protocol
from uuid import UUID


class ActiveRecordLike(Protocol):
    """Structural contract for active records read by the migration planner.

    Mirrors the arsip_aktif columns the core needs; the ORM model satisfies it.
    """
    id_arsip_aktif: UUID
    nomor_berkas: int | str | None
    kode_klasifikasi: str | None
    uraian_informasi: str | None
    kurun_waktu: str | None
    jumlah: int | None
    keterangan: str | None
    tingkat_perkembangan: str | None
    jangka_simpan_mulai: date | None
    jangka_simpan_berakhir: date | None
    jenis_arsip: str | None
    masa_retensi_inaktif: int | None
    nasib_akhir: str | None
    file_url: str | None


class NotificationSink(Protocol):
    """Fire-and-forget notification contract — implemented by shell."""
    async def notify_role(
        self, role: str, title: str, message: str, link: str,
        category: str, unit_id: int | None = None,
    ) -> int: ...
