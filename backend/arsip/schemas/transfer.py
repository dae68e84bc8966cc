"""Transfer Schemas — Pydantic request bodies for the transfer wizard API.

Invariants:
    - Record ids are UUIDs at the boundary; services receive them as strings
    - Free-text fields stripped; required step data is NOT enforced here
      (a half-filled memo is a valid draft, the step exit check rejects it)
    - Inactive retention years, when given, are within 0..MAX_RETENTION_YEARS

Design Decisions:
    - Drafts persist on every keystroke-level save, so bodies mirror the
      value objects field-for-field instead of validating completeness
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from arsip.core.domain_types import CandidateFilterMode, MAX_RETENTION_YEARS


class ToggleRequest(BaseModel):
    """Select or deselect one candidate record."""
    id_arsip_aktif: UUID


class PageSelectionRequest(BaseModel):
    """Select or deselect every record visible on one filtered page."""
    select: bool
    page: int = Field(1, ge=1)
    search: str | None = Field(None, max_length=200)
    filter: CandidateFilterMode = CandidateFilterMode.ALL


class MemoUpdate(BaseModel):
    """Draft of the transfer memo (berita acara)."""
    nomor_berita_acara: str = Field("", max_length=100)
    tanggal_berita_acara: str = Field("", max_length=10)
    keterangan: str = Field("", max_length=2000)
    dasar: str | None = Field(None, max_length=1000)

    @field_validator("nomor_berita_acara", "tanggal_berita_acara")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class DestinationUpdate(BaseModel):
    """Draft of the destination info (storage location, box, category)."""
    lokasi_simpan: str = Field("", max_length=200)
    nomor_boks: str = Field("", max_length=100)
    kategori_arsip: str | None = Field(None, max_length=100)
    keterangan: str = Field("", max_length=2000)

    @field_validator("lokasi_simpan", "nomor_boks")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class RecordEditUpdate(BaseModel):
    """Per-record override; omitted or null fields fall back to derived values."""
    jenis_arsip: str | None = Field(None, max_length=200)
    masa_retensi_inaktif: int | None = Field(None, ge=0, le=MAX_RETENTION_YEARS)
    nasib_akhir: str | None = Field(None, max_length=50)
    nomor_boks: str | None = Field(None, max_length=100)
    tingkat_perkembangan: str | None = Field(None, max_length=50)
