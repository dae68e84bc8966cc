"""Step Transition Enforcement — validates exit preconditions of each wizard step.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success (first error wins)
    - A failed check never mutates state: the transition simply does not happen
    - Steps are strictly ordered; advancing from COMPLETED is never allowed

Design Decisions:
    - Return dicts (not exceptions): workflow operations hand results straight
      back to the caller, keeping the error path identical to the success path
      (ADR: uniform result shape)
    - Error dicts built from the typed errors in core/errors.py so codes and
      severities stay in one place
"""

from arsip.core.domain_types import WorkflowStep
from arsip.core.effective_fields import EffectiveFields, is_present, missing_fields
from arsip.core.errors import (
    ApprovalBlockedError,
    InvalidTransitionError,
    TransferValidationError,
)
from arsip.core.retention import parse_iso
from arsip.core.transfer_state import TransferState

_FIELD_LABELS = {
    "jenis_arsip": "archive type",
    "masa_retensi_inaktif": "inactive retention (0-100 years)",
    "nasib_akhir": "final disposition",
    "nomor_boks": "box number",
}


# --- Step 1 -> 2: SelectRecords -> ComposeMemo ---------------------------------

def check_selection_exit(state: TransferState) -> dict | None:
    """Requires at least one selected record."""
    if not state.selected_ids:
        return _invalid("Select at least one record to transfer.", "selected_arsip_ids")
    return None


# --- Step 2 -> 3: ComposeMemo -> AwaitApproval ---------------------------------

def check_memo_exit(state: TransferState) -> dict | None:
    """Requires memo number and a valid memo date."""
    ba = state.berita_acara
    if not is_present(ba.nomor_berita_acara):
        return _invalid("Memo number is required.", "nomor_berita_acara")
    if not is_present(ba.tanggal_berita_acara):
        return _invalid("Memo date is required.", "tanggal_berita_acara")
    if parse_iso(ba.tanggal_berita_acara) is None:
        return _invalid(
            "Memo date must be a calendar date (YYYY-MM-DD).",
            "tanggal_berita_acara",
        )
    return None


# --- Step 3 -> 4: AwaitApproval -> ComposeDestination --------------------------

def check_approval_exit(state: TransferState) -> dict | None:
    """Requires both approver slots Approved. Rejected blocks regardless."""
    approval = state.approval_status
    if approval.both_approved:
        return None
    return ApprovalBlockedError(
        approval.pending_slots, approval.rejected_slots,
    ).to_result()


# --- Step 4 -> 5: ComposeDestination -> Completed ------------------------------

def check_destination_info(state: TransferState) -> dict | None:
    """Process-level destination location and box number."""
    info = state.pemindahan_info
    if not is_present(info.lokasi_simpan):
        return _invalid("Destination location is required.", "lokasi_simpan")
    if not is_present(info.nomor_boks):
        return _invalid("Box number is required.", "nomor_boks")
    return None


def check_destination_exit(
    state: TransferState, fields_by_id: dict[str, EffectiveFields],
) -> dict | None:
    """Destination info plus every selected record's required fields.

    fields_by_id holds the merged values for each selected id; an id with no
    entry means the record could not be loaded.
    """
    error = check_destination_info(state)
    if error:
        return error
    for record_id in state.selected_ids:
        fields = fields_by_id.get(record_id)
        if fields is None:
            return _invalid(
                "Selected record no longer exists.", "selected_arsip_ids", record_id,
            )
        missing = missing_fields(fields)
        if missing:
            name = missing[0]
            return _invalid(
                f"Record is missing {_FIELD_LABELS[name]}.", name, record_id,
            )
    return None


# --- Navigation ---------------------------------------------------------------

def check_not_completed(state: TransferState) -> dict | None:
    """Completed processes are frozen."""
    if state.is_completed or state.current_step == WorkflowStep.COMPLETED:
        return InvalidTransitionError(
            "This transfer is completed. Start a new transfer instead.",
        ).to_result()
    return None


def check_editable_at(state: TransferState, step: WorkflowStep) -> dict | None:
    """Mutation allowed only on its own step, and never during migration."""
    error = check_not_completed(state)
    if error:
        return error
    if state.migration_in_flight:
        return InvalidTransitionError("Migration is in progress.").to_result()
    if state.current_step != step:
        return InvalidTransitionError(
            f"Only editable at step {int(step)}; process is at step "
            f"{int(state.current_step)}.",
        ).to_result()
    return None


def check_retreat(state: TransferState) -> dict | None:
    """Backward navigation: never from step 1, never from the terminal step."""
    error = check_not_completed(state)
    if error:
        return error
    if state.current_step == WorkflowStep.SELECT_RECORDS:
        return InvalidTransitionError("Already at the first step.").to_result()
    if state.migration_in_flight:
        return InvalidTransitionError("Migration is in progress.").to_result()
    return None


def validate_advance(
    state: TransferState,
    fields_by_id: dict[str, EffectiveFields] | None = None,
) -> dict | None:
    """Validate the exit precondition of the current step."""
    error = check_not_completed(state)
    if error:
        return error
    match state.current_step:
        case WorkflowStep.SELECT_RECORDS:
            return check_selection_exit(state)
        case WorkflowStep.COMPOSE_MEMO:
            return check_memo_exit(state)
        case WorkflowStep.AWAIT_APPROVAL:
            return check_approval_exit(state)
        case WorkflowStep.COMPOSE_DESTINATION:
            return check_destination_exit(state, fields_by_id or {})
    return None


def _invalid(message: str, field: str, record_id: str | None = None) -> dict:
    """Construct a standard validation error dict."""
    return TransferValidationError(message, field, record_id).to_result()
