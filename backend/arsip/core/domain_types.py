"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - WorkflowStep is strictly ordered 1..5; no value outside that range is valid
    - Persisted approval / memo values use the archive schema vocabulary
      (Menunggu / Disetujui / Ditolak, Selesai) — never raw strings in logic
    - Actor is always present in the core (authentication is a precondition)

Design Decisions:
    - str Enums: serialize into JSON columns without custom encoders
    - IntEnum for WorkflowStep: current_step column stays a plain integer
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProcessId = NewType("ProcessId", UUID)
ActiveRecordId = NewType("ActiveRecordId", UUID)
InactiveRecordId = NewType("InactiveRecordId", UUID)
MemoId = NewType("MemoId", UUID)
UserId = NewType("UserId", str)
UnitId = NewType("UnitId", int)


# ─── Constants ───────────────────────────────────────────────────

PERIOD_SEPARATOR = " s.d. "
DEFAULT_LEGAL_BASIS = (
    "Jadwal Retensi Arsip (JRA) dan peraturan kearsipan yang berlaku"
)
DEFAULT_ARCHIVE_CATEGORY = "Arsip Konvensional"
MAX_RETENTION_YEARS = 100
WORKFLOW_ROLES = ("Pegawai",)
TRANSFER_NOTIFICATION_CATEGORY = "pemindahan_arsip"


# ─── Enums ───────────────────────────────────────────────────────

class WorkflowStep(IntEnum):
    """The five wizard steps — strictly ordered, no skipping."""
    SELECT_RECORDS = 1
    COMPOSE_MEMO = 2
    AWAIT_APPROVAL = 3
    COMPOSE_DESTINATION = 4
    COMPLETED = 5


class ApprovalDecision(str, Enum):
    """Status of one approver slot."""
    PENDING = "Menunggu"
    APPROVED = "Disetujui"
    REJECTED = "Ditolak"


class ApproverSlot(str, Enum):
    """The two named approver slots (keys of the persisted approval JSON)."""
    DEPARTMENT_HEAD = "kepala_bidang"
    SECRETARY = "sekretaris"


class ApproverRole(str, Enum):
    """User roles holding an approver slot."""
    DEPARTMENT_HEAD = "Kepala_Bidang"
    SECRETARY = "Sekretaris"


class ProcessStatusTag(str, Enum):
    """Migration lifecycle tag stored in process_status."""
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class MemoStatus(str, Enum):
    """Transfer memo (berita acara) status."""
    PENDING = "Menunggu"
    COMPLETED = "Selesai"


class RecordApprovalStatus(str, Enum):
    """Approval status carried by active and inactive records."""
    PENDING = "Menunggu"
    APPROVED = "Disetujui"
    REJECTED = "Ditolak"


class CandidateFilterMode(str, Enum):
    """Tri-state filter over the candidate listing."""
    ALL = "all"
    EXPIRED = "expired"
    SELECTED = "selected"


class HistoryFilter(str, Enum):
    """Filter over the actor's transfer history."""
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


# ─── Actor ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Actor:
    """Authenticated caller — identity supplied by the surrounding application."""
    user_id: str
    role: str
    unit_id: int | None = None

    @property
    def may_transfer(self) -> bool:
        return self.role in WORKFLOW_ROLES
