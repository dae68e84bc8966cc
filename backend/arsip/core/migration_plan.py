"""Migration Plan — deterministic ordering and inactive-record row planning.

Invariants:
    - All functions are PURE: no IO (today's date is passed in)
    - Order: classification code (dotted numeric), creation period, original
      sequence number (numeric when parseable, else lexical), id
    - Planned rows are numbered exactly 1..N in that order
    - Any single record failing validation aborts the whole plan (no partial batch)

Design Decisions:
    - Planning separated from execution: the executor only inserts what the plan
      returns, so the numbering and field derivation are testable without a DB
    - Raises TransferValidationError (not an error dict): the executor turns it
      into the persisted process error in one place
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable
from uuid import UUID

from arsip.core.classification import (
    ClassificationInfo, base_code, classification_sort_key,
)
from arsip.core.domain_types import RecordApprovalStatus
from arsip.core.effective_fields import resolve_effective_fields, missing_fields
from arsip.core.errors import TransferValidationError
from arsip.core.repository_protocols import ActiveRecordLike
from arsip.core.retention import derive_inactive_period
from arsip.core.transfer_state import TransferState


@dataclass(frozen=True)
class PlannedInactiveRecord:
    """One arsip_inaktif row to insert."""
    nomor_berkas: int
    id_arsip_aktif: UUID
    kode_klasifikasi: str | None
    jenis_arsip: str
    uraian_informasi: str | None
    kurun_waktu: str | None
    tingkat_perkembangan: str | None
    jumlah: int | None
    keterangan: str | None
    inaktif_mulai: date | None
    inaktif_berakhir: date | None
    masa_retensi: int
    nasib_akhir: str
    nomor_definitif_folder_dan_boks: str
    lokasi_simpan: str
    kategori_arsip: str
    tanggal_pindah: date
    file_url: str | None
    status_persetujuan: str = RecordApprovalStatus.PENDING.value


def _sequence_key(value: int | str | None) -> tuple:
    text = "" if value is None else str(value).strip()
    try:
        return (0, int(text), "")
    except ValueError:
        return (1, 0, text)


def migration_sort_key(record: ActiveRecordLike) -> tuple:
    return (
        classification_sort_key(record.kode_klasifikasi),
        record.kurun_waktu or "",
        _sequence_key(record.nomor_berkas),
        str(record.id_arsip_aktif),
    )


def order_for_migration(records: Iterable[ActiveRecordLike]) -> list[ActiveRecordLike]:
    """Stable deterministic order that defines the new sequence numbers."""
    return sorted(records, key=migration_sort_key)


def plan_inactive_records(
    records: Iterable[ActiveRecordLike],
    classifications: dict[str, ClassificationInfo],
    state: TransferState,
    today: date,
) -> list[PlannedInactiveRecord]:
    """Build the batch of inactive rows, numbered 1..N.

    classifications is keyed by base code as produced by the resolver.
    Raises TransferValidationError for the first record with a missing field.
    """
    info = state.pemindahan_info
    planned = []
    for number, record in enumerate(order_for_migration(records), start=1):
        record_id = str(record.id_arsip_aktif)
        fields = resolve_effective_fields(
            record,
            classifications.get(base_code(record.kode_klasifikasi)),
            state.edit_for(record_id),
            info.nomor_boks,
        )
        missing = missing_fields(fields)
        if missing:
            raise TransferValidationError(
                f"Record {record_id} (code {record.kode_klasifikasi}, "
                f"file no. {record.nomor_berkas}) is missing {missing[0]}.",
                missing[0], record_id,
            )
        period = derive_inactive_period(
            record.jangka_simpan_berakhir, fields.masa_retensi_inaktif,
        )
        planned.append(PlannedInactiveRecord(
            nomor_berkas=number,
            id_arsip_aktif=record.id_arsip_aktif,
            kode_klasifikasi=record.kode_klasifikasi,
            jenis_arsip=fields.jenis_arsip,
            uraian_informasi=record.uraian_informasi,
            kurun_waktu=record.kurun_waktu,
            tingkat_perkembangan=fields.tingkat_perkembangan,
            jumlah=record.jumlah,
            keterangan=record.keterangan,
            inaktif_mulai=period.start if period else None,
            inaktif_berakhir=period.end if period else None,
            masa_retensi=fields.masa_retensi_inaktif,
            nasib_akhir=fields.nasib_akhir,
            nomor_definitif_folder_dan_boks=fields.nomor_boks,
            lokasi_simpan=info.lokasi_simpan,
            kategori_arsip=info.kategori_arsip,
            tanggal_pindah=today,
            file_url=record.file_url,
        ))
    return planned
