"""Transfer State Snapshot — JSON column (de)serialization for TransferState.

Invariants:
    - to_* functions produce JSON-safe dicts (no Enums, no dataclasses)
    - from_* functions accept any valid stored dict; missing keys fall back to defaults
    - arsip_edits accepts both the keyed form and the legacy list-of-edits form
      ([{"id_arsip_aktif": ..., "jenis_arsip_edited": ...}, ...])

Design Decisions:
    - Extracted from transfer_state.py: serialization is a persistence concern
    - Edit keys carry the "_edited" suffix used by the stored rows, so rows written
      by the earlier client remain readable
"""

from arsip.core.classification import coerce_years
from arsip.core.domain_types import ApprovalDecision, ProcessStatusTag, WorkflowStep
from arsip.core.transfer_state import (
    ApprovalSlot,
    ApprovalStatus,
    BeritaAcara,
    PemindahanInfo,
    ProcessStatus,
    RecordEdit,
    TransferState,
)

# RecordEdit attribute -> stored key
_EDIT_KEYS: dict[str, str] = {
    "jenis_arsip": "jenis_arsip_edited",
    "masa_retensi_inaktif": "masa_retensi_inaktif_edited",
    "nasib_akhir": "nasib_akhir_edited",
    "nomor_boks": "nomor_boks_edited",
    "tingkat_perkembangan": "tingkat_perkembangan_edited",
}


# ─── Memo ────────────────────────────────────────────────────────

def berita_acara_to_dict(ba: BeritaAcara) -> dict:
    return {
        "nomor_berita_acara": ba.nomor_berita_acara,
        "tanggal_berita_acara": ba.tanggal_berita_acara,
        "keterangan": ba.keterangan,
        "dasar": ba.dasar,
    }


def berita_acara_from_dict(data: dict | None) -> BeritaAcara:
    ba = BeritaAcara()
    if not data:
        return ba
    for key in ("nomor_berita_acara", "tanggal_berita_acara", "keterangan", "dasar"):
        if data.get(key) is not None:
            setattr(ba, key, str(data[key]))
    return ba


# ─── Destination + edits ─────────────────────────────────────────

def record_edit_to_dict(edit: RecordEdit) -> dict:
    return {
        stored: getattr(edit, attr)
        for attr, stored in _EDIT_KEYS.items()
        if getattr(edit, attr) not in (None, "")
    }


def record_edit_from_dict(data: dict) -> RecordEdit:
    edit = RecordEdit()
    for attr, stored in _EDIT_KEYS.items():
        value = data.get(stored, data.get(attr))
        if value in (None, ""):
            continue
        if attr == "masa_retensi_inaktif":
            value = coerce_years(value)
        else:
            value = str(value)
        setattr(edit, attr, value)
    return edit


def _edits_from_stored(raw: object) -> dict[str, RecordEdit]:
    if isinstance(raw, dict):
        items = raw.items()
    elif isinstance(raw, list):
        items = (
            (str(e.get("id_arsip_aktif")), e) for e in raw
            if isinstance(e, dict) and e.get("id_arsip_aktif")
        )
    else:
        return {}
    edits = {}
    for record_id, data in items:
        edit = record_edit_from_dict(data or {})
        if not edit.is_empty:
            edits[str(record_id)] = edit
    return edits


def pemindahan_info_to_dict(info: PemindahanInfo) -> dict:
    return {
        "lokasi_simpan": info.lokasi_simpan,
        "nomor_boks": info.nomor_boks,
        "kategori_arsip": info.kategori_arsip,
        "keterangan": info.keterangan,
        "arsip_edits": {
            rid: record_edit_to_dict(edit)
            for rid, edit in info.arsip_edits.items()
        },
    }


def pemindahan_info_from_dict(data: dict | None) -> PemindahanInfo:
    info = PemindahanInfo()
    if not data:
        return info
    for key in ("lokasi_simpan", "nomor_boks", "kategori_arsip", "keterangan"):
        if data.get(key) is not None:
            setattr(info, key, str(data[key]))
    info.arsip_edits = _edits_from_stored(data.get("arsip_edits"))
    return info


# ─── Approval ────────────────────────────────────────────────────

def _slot_to_dict(slot: ApprovalSlot) -> dict:
    return {
        "status": slot.status.value,
        "verified_by": slot.verified_by,
        "verified_at": slot.verified_at,
    }


def _slot_from_dict(data: dict | None) -> ApprovalSlot:
    if not data:
        return ApprovalSlot()
    try:
        status = ApprovalDecision(data.get("status") or ApprovalDecision.PENDING.value)
    except ValueError:
        status = ApprovalDecision.PENDING
    return ApprovalSlot(
        status=status,
        verified_by=data.get("verified_by"),
        verified_at=data.get("verified_at"),
    )


def approval_status_to_dict(approval: ApprovalStatus) -> dict:
    return {
        "kepala_bidang": _slot_to_dict(approval.kepala_bidang),
        "sekretaris": _slot_to_dict(approval.sekretaris),
    }


def approval_status_from_dict(data: dict | None) -> ApprovalStatus:
    if not data:
        return ApprovalStatus()
    return ApprovalStatus(
        kepala_bidang=_slot_from_dict(data.get("kepala_bidang")),
        sekretaris=_slot_from_dict(data.get("sekretaris")),
    )


# ─── Process status ──────────────────────────────────────────────

def process_status_to_dict(ps: ProcessStatus) -> dict:
    out: dict = {"status": ps.status.value}
    if ps.message:
        out["message"] = ps.message
    return out


def process_status_from_dict(data: dict | None) -> ProcessStatus:
    if not data:
        return ProcessStatus()
    try:
        tag = ProcessStatusTag(data.get("status") or ProcessStatusTag.IDLE.value)
    except ValueError:
        tag = ProcessStatusTag.IDLE
    return ProcessStatus(tag, data.get("message"))


# ─── Whole state ─────────────────────────────────────────────────

def transfer_state_to_snapshot(state: TransferState) -> dict:
    """Serialize TransferState to the column dict of pemindahan_process. Pure, no IO."""
    return {
        "current_step": int(state.current_step),
        "selected_arsip_ids": list(state.selected_ids),
        "berita_acara": berita_acara_to_dict(state.berita_acara),
        "pemindahan_info": pemindahan_info_to_dict(state.pemindahan_info),
        "approval_status": approval_status_to_dict(state.approval_status),
        "process_status": process_status_to_dict(state.process_status),
        "is_completed": state.is_completed,
    }


def transfer_state_from_snapshot(data: dict) -> TransferState:
    """Reconstruct TransferState from a column dict. Pure, no IO."""
    state = TransferState()
    if not data:
        return state
    step = data.get("current_step")
    if step in {s.value for s in WorkflowStep}:
        state.current_step = WorkflowStep(step)
    seen: set[str] = set()
    for rid in data.get("selected_arsip_ids") or []:
        if rid and str(rid) not in seen:
            seen.add(str(rid))
            state.selected_ids.append(str(rid))
    state.berita_acara = berita_acara_from_dict(data.get("berita_acara"))
    state.pemindahan_info = pemindahan_info_from_dict(data.get("pemindahan_info"))
    state.approval_status = approval_status_from_dict(data.get("approval_status"))
    state.process_status = process_status_from_dict(data.get("process_status"))
    state.is_completed = bool(data.get("is_completed"))
    return state
