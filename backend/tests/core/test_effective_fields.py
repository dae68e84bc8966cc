"""Effective field tests — override > classification default > stored value.

Invariants covered:
    - Per-record overrides always win when present (blank strings do not count)
    - Classification defaults win over the record's own stored values
    - Box number falls back to the process-level box; development level to the record
    - Missing-field detection covers type, years (None or negative), disposition, box
"""

from types import SimpleNamespace

from arsip.core.classification import ClassificationInfo
from arsip.core.effective_fields import (
    EffectiveFields, FieldLayers, is_present, missing_fields, resolve_effective_fields,
)
from arsip.core.transfer_state import RecordEdit

SURAT = ClassificationInfo("045", "Surat Keputusan", 2, 5, "Musnah")


def _record(**overrides):
    fields = {
        "jenis_arsip": "Stored type",
        "masa_retensi_inaktif": 9,
        "nasib_akhir": "Permanen",
        "tingkat_perkembangan": "Asli",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_is_present():
    assert is_present(0)
    assert is_present("x")
    assert not is_present("  ")
    assert not is_present(None)


def test_field_layers_priority():
    assert FieldLayers("a", "b", "c").value() == "a"
    assert FieldLayers(None, "b", "c").value() == "b"
    assert FieldLayers("", None, "c").value() == "c"
    assert FieldLayers().value() is None


def test_classification_beats_stored_values():
    fields = resolve_effective_fields(_record(), SURAT, None, "B-12")
    assert fields == EffectiveFields(
        jenis_arsip="Surat Keputusan",
        masa_retensi_inaktif=5,
        nasib_akhir="Musnah",
        nomor_boks="B-12",
        tingkat_perkembangan="Asli",
    )


def test_override_beats_classification():
    edit = RecordEdit(
        jenis_arsip="Nota Dinas", masa_retensi_inaktif=0,
        nasib_akhir="Permanen", nomor_boks="B-99", tingkat_perkembangan="Salinan",
    )
    fields = resolve_effective_fields(_record(), SURAT, edit, "B-12")
    assert fields.jenis_arsip == "Nota Dinas"
    assert fields.masa_retensi_inaktif == 0
    assert fields.nasib_akhir == "Permanen"
    assert fields.nomor_boks == "B-99"
    assert fields.tingkat_perkembangan == "Salinan"


def test_stored_values_used_when_classification_unresolved():
    fields = resolve_effective_fields(_record(), None, None, "B-12")
    assert fields.jenis_arsip == "Stored type"
    assert fields.masa_retensi_inaktif == 9
    assert fields.nasib_akhir == "Permanen"


def test_partial_classification_falls_through_per_field():
    partial = ClassificationInfo("045", None, None, None, "Musnah")
    fields = resolve_effective_fields(_record(), partial, None)
    assert fields.jenis_arsip == "Stored type"
    assert fields.masa_retensi_inaktif == 9
    assert fields.nasib_akhir == "Musnah"


def test_no_box_anywhere():
    fields = resolve_effective_fields(_record(), SURAT, None, "")
    assert fields.nomor_boks is None
    assert missing_fields(fields) == ["nomor_boks"]


def test_missing_fields_all():
    fields = EffectiveFields(None, None, "  ", None, None)
    assert missing_fields(fields) == [
        "jenis_arsip", "masa_retensi_inaktif", "nasib_akhir", "nomor_boks",
    ]


def test_negative_years_count_as_missing():
    fields = EffectiveFields("Surat", -1, "Musnah", "B-1", None)
    assert missing_fields(fields) == ["masa_retensi_inaktif"]


def test_zero_years_is_valid():
    fields = EffectiveFields("Surat", 0, "Musnah", "B-1", None)
    assert missing_fields(fields) == []


def test_years_beyond_limit_count_as_missing():
    fields = EffectiveFields("Surat", 101, "Musnah", "B-1", None)
    assert missing_fields(fields) == ["masa_retensi_inaktif"]
