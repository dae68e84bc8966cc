"""Transfer State — the pure aggregate behind one transfer process.

Invariants:
    - current_step is always a WorkflowStep (1..5)
    - selected_ids is ordered and duplicate-free
    - Selection, memo, and destination are frozen once is_completed is True
    - approval_status is written by the external verification workflow; the core only reads it
    - Per-record edits are keyed by active-record id (str)

Design Decisions:
    - Pure dataclasses, no IO: the service layer loads a row, mutates the state,
      and writes the snapshot back immediately (write-through persistence)
    - Value objects mirror the JSON columns of pemindahan_process one-to-one
"""

from dataclasses import dataclass, field
from datetime import date

from arsip.core.domain_types import (
    ApprovalDecision,
    ApproverSlot,
    DEFAULT_ARCHIVE_CATEGORY,
    DEFAULT_LEGAL_BASIS,
    ProcessStatusTag,
    WorkflowStep,
)


@dataclass
class BeritaAcara:
    """Transfer memo value object."""
    nomor_berita_acara: str = ""
    tanggal_berita_acara: str = field(default_factory=lambda: date.today().isoformat())
    keterangan: str = ""
    dasar: str = DEFAULT_LEGAL_BASIS


@dataclass
class RecordEdit:
    """User-supplied overrides for one selected record (all optional)."""
    jenis_arsip: str | None = None
    masa_retensi_inaktif: int | None = None
    nasib_akhir: str | None = None
    nomor_boks: str | None = None
    tingkat_perkembangan: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            v in (None, "") for v in (
                self.jenis_arsip, self.masa_retensi_inaktif, self.nasib_akhir,
                self.nomor_boks, self.tingkat_perkembangan,
            )
        )


@dataclass
class PemindahanInfo:
    """Destination info for the whole batch plus per-record edit overlay."""
    lokasi_simpan: str = ""
    nomor_boks: str = ""
    kategori_arsip: str = DEFAULT_ARCHIVE_CATEGORY
    keterangan: str = ""
    arsip_edits: dict[str, RecordEdit] = field(default_factory=dict)


@dataclass
class ApprovalSlot:
    """One approver slot."""
    status: ApprovalDecision = ApprovalDecision.PENDING
    verified_by: str | None = None
    verified_at: str | None = None


@dataclass
class ApprovalStatus:
    """Two independent approver slots — both must be Approved to proceed."""
    kepala_bidang: ApprovalSlot = field(default_factory=ApprovalSlot)
    sekretaris: ApprovalSlot = field(default_factory=ApprovalSlot)

    def slots(self) -> dict[ApproverSlot, ApprovalSlot]:
        return {
            ApproverSlot.DEPARTMENT_HEAD: self.kepala_bidang,
            ApproverSlot.SECRETARY: self.sekretaris,
        }

    @property
    def both_approved(self) -> bool:
        return all(
            s.status == ApprovalDecision.APPROVED for s in self.slots().values()
        )

    @property
    def pending_slots(self) -> list[str]:
        return [
            name.value for name, s in self.slots().items()
            if s.status == ApprovalDecision.PENDING
        ]

    @property
    def rejected_slots(self) -> list[str]:
        return [
            name.value for name, s in self.slots().items()
            if s.status == ApprovalDecision.REJECTED
        ]


@dataclass
class ProcessStatus:
    """Migration lifecycle tag with optional error message."""
    status: ProcessStatusTag = ProcessStatusTag.IDLE
    message: str | None = None


@dataclass
class TransferState:
    """Per-process workflow state — pure dataclass, no IO."""

    current_step: WorkflowStep = WorkflowStep.SELECT_RECORDS
    selected_ids: list[str] = field(default_factory=list)
    berita_acara: BeritaAcara = field(default_factory=BeritaAcara)
    pemindahan_info: PemindahanInfo = field(default_factory=PemindahanInfo)
    approval_status: ApprovalStatus = field(default_factory=ApprovalStatus)
    process_status: ProcessStatus = field(default_factory=ProcessStatus)
    is_completed: bool = False

    # ─── Selection ───────────────────────────────────────────────

    def is_selected(self, record_id: str) -> bool:
        return record_id in self.selected_ids

    def toggle(self, record_id: str) -> bool:
        """Toggle one record. Returns True if it is now selected."""
        if record_id in self.selected_ids:
            self.selected_ids.remove(record_id)
            self.pemindahan_info.arsip_edits.pop(record_id, None)
            return False
        self.selected_ids.append(record_id)
        return True

    def select_many(self, record_ids: list[str]) -> int:
        """Append unselected ids in the given order. Returns count added."""
        added = 0
        for rid in record_ids:
            if rid not in self.selected_ids:
                self.selected_ids.append(rid)
                added += 1
        return added

    def deselect_many(self, record_ids: list[str]) -> int:
        """Remove the given ids from the selection. Returns count removed."""
        drop = set(record_ids)
        before = len(self.selected_ids)
        self.selected_ids = [rid for rid in self.selected_ids if rid not in drop]
        for rid in drop:
            self.pemindahan_info.arsip_edits.pop(rid, None)
        return before - len(self.selected_ids)

    def prune(self, valid_ids: set[str]) -> list[str]:
        """Drop selected ids not in valid_ids. Returns the dropped ids."""
        dropped = [rid for rid in self.selected_ids if rid not in valid_ids]
        if dropped:
            self.deselect_many(dropped)
        return dropped

    # ─── Edits ───────────────────────────────────────────────────

    def edit_for(self, record_id: str) -> RecordEdit | None:
        return self.pemindahan_info.arsip_edits.get(record_id)

    def set_edit(self, record_id: str, edit: RecordEdit) -> None:
        if edit.is_empty:
            self.pemindahan_info.arsip_edits.pop(record_id, None)
        else:
            self.pemindahan_info.arsip_edits[record_id] = edit

    # ─── Lifecycle ───────────────────────────────────────────────

    @property
    def migration_in_flight(self) -> bool:
        return self.process_status.status == ProcessStatusTag.PROCESSING

    @property
    def migrated(self) -> bool:
        return self.process_status.status == ProcessStatusTag.COMPLETED

    def mark_processing(self) -> None:
        self.process_status = ProcessStatus(ProcessStatusTag.PROCESSING)

    def mark_error(self, message: str) -> None:
        self.process_status = ProcessStatus(ProcessStatusTag.ERROR, message)

    def mark_completed(self) -> None:
        self.process_status = ProcessStatus(ProcessStatusTag.COMPLETED)
        self.current_step = WorkflowStep.COMPLETED
        self.is_completed = True

    def reset(self) -> None:
        """Back to step 1 with no selection (used when every selection vanished).

        The memo draft and destination info are kept; per-record edits go
        with the records they belonged to.
        """
        fresh = TransferState()
        self.current_step = fresh.current_step
        self.selected_ids = fresh.selected_ids
        self.pemindahan_info.arsip_edits = {}
        self.approval_status = fresh.approval_status
        self.process_status = fresh.process_status
