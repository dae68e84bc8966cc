"""Migration plan tests — deterministic ordering, 1..N numbering, all-or-nothing validation.

Invariants covered:
    - Order: classification code, creation period, original number, id
    - New numbers are exactly 1..N in that order, regardless of input order
    - Inactive period derived from the active end plus the effective years
    - A single incomplete record aborts the whole plan, naming record and field
"""

from datetime import date
from types import SimpleNamespace
from uuid import UUID

import pytest

from arsip.core.classification import ClassificationInfo
from arsip.core.errors import TransferValidationError
from arsip.core.migration_plan import order_for_migration, plan_inactive_records
from arsip.core.transfer_state import RecordEdit, TransferState

TODAY = date(2026, 3, 1)
CLASSIFICATIONS = {
    "045": ClassificationInfo("045", "Surat Keputusan", 2, 5, "Musnah"),
    "000.1.2": ClassificationInfo("000.1.2", "Laporan Kegiatan", 1, 3, "Permanen"),
}


def _record(n: int, code: str, **overrides):
    fields = {
        "id_arsip_aktif": UUID(int=n),
        "nomor_berkas": n,
        "kode_klasifikasi": code,
        "uraian_informasi": f"Record {n}",
        "kurun_waktu": "2021",
        "jumlah": 1,
        "keterangan": None,
        "tingkat_perkembangan": "Asli",
        "jangka_simpan_berakhir": date(2023, 12, 31),
        "jenis_arsip": None,
        "masa_retensi_inaktif": None,
        "nasib_akhir": None,
        "file_url": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _state(*records) -> TransferState:
    state = TransferState(selected_ids=[str(r.id_arsip_aktif) for r in records])
    state.pemindahan_info.lokasi_simpan = "Gudang A"
    state.pemindahan_info.nomor_boks = "B-12"
    return state


def test_order_by_code_then_period_then_number():
    a = _record(1, "045/IV", kurun_waktu="2022")
    b = _record(2, "045/IV", kurun_waktu="2021", nomor_berkas="10")
    c = _record(3, "045/IV", kurun_waktu="2021", nomor_berkas="9")
    d = _record(4, "000.1.2")
    assert order_for_migration([a, b, c, d]) == [d, c, b, a]


def test_non_numeric_sequence_sorts_after_numeric():
    a = _record(1, "045", nomor_berkas="X-1")
    b = _record(2, "045", nomor_berkas=99)
    assert order_for_migration([a, b]) == [b, a]


def test_plan_numbers_one_to_n():
    records = [_record(7, "045/IV"), _record(3, "000.1.2"), _record(5, "045/IV")]
    plan = plan_inactive_records(records, CLASSIFICATIONS, _state(*records), TODAY)
    assert [p.nomor_berkas for p in plan] == [1, 2, 3]
    assert [p.id_arsip_aktif for p in plan] == [UUID(int=3), UUID(int=5), UUID(int=7)]


def test_plan_derives_fields_and_period():
    record = _record(1, "045/IV")
    [row] = plan_inactive_records([record], CLASSIFICATIONS, _state(record), TODAY)
    assert row.jenis_arsip == "Surat Keputusan"
    assert row.masa_retensi == 5
    assert row.nasib_akhir == "Musnah"
    assert row.inaktif_mulai == date(2024, 1, 1)
    assert row.inaktif_berakhir == date(2028, 12, 31)
    assert row.nomor_definitif_folder_dan_boks == "B-12"
    assert row.lokasi_simpan == "Gudang A"
    assert row.kategori_arsip == "Arsip Konvensional"
    assert row.tanggal_pindah == TODAY
    assert row.status_persetujuan == "Menunggu"
    assert row.kode_klasifikasi == "045/IV"


def test_plan_applies_edits():
    record = _record(1, "045/IV")
    state = _state(record)
    state.set_edit(str(record.id_arsip_aktif), RecordEdit(masa_retensi_inaktif=1, nomor_boks="B-1"))
    [row] = plan_inactive_records([record], CLASSIFICATIONS, state, TODAY)
    assert row.masa_retensi == 1
    assert row.inaktif_berakhir == date(2024, 12, 31)
    assert row.nomor_definitif_folder_dan_boks == "B-1"


def test_one_incomplete_record_aborts_plan():
    good = _record(1, "045/IV")
    unknown = _record(2, "999.9")
    with pytest.raises(TransferValidationError) as exc_info:
        plan_inactive_records([good, unknown], CLASSIFICATIONS, _state(good, unknown), TODAY)
    assert exc_info.value.field == "jenis_arsip"
    assert exc_info.value.record_id == str(unknown.id_arsip_aktif)


def test_unknown_code_rescued_by_stored_values():
    record = _record(
        1, "999.9", jenis_arsip="Memo", masa_retensi_inaktif=2, nasib_akhir="Musnah",
    )
    [row] = plan_inactive_records([record], CLASSIFICATIONS, _state(record), TODAY)
    assert row.jenis_arsip == "Memo"
    assert row.inaktif_berakhir == date(2025, 12, 31)
