"""Error hierarchy tests — response envelopes, result dicts, role gate."""

from arsip.core.domain_types import Actor, WorkflowStep
from arsip.core.errors import (
    AccessDeniedError,
    ApprovalBlockedError,
    ErrorContext,
    ExecutionError,
    MemoNumberTakenError,
    TransferValidationError,
)


def test_validation_error_envelope_carries_field_and_record():
    err = TransferValidationError("Box number is required.", "nomor_boks", "rec-1")
    body = err.to_response()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert body["context"]["field"] == "nomor_boks"
    assert body["context"]["record_id"] == "rec-1"
    assert err.http_status == 400


def test_validation_result_shape():
    result = TransferValidationError("Memo number is required.", "nomor_berita_acara").to_result()
    assert result == {
        "status": "error",
        "error_code": "VALIDATION_ERROR",
        "message": "Memo number is required.",
        "severity": "error",
        "recoverable": True,
        "field": "nomor_berita_acara",
    }


def test_user_message_overrides_result_message():
    ctx = ErrorContext(user_message="Try again later.")
    assert ExecutionError("stack trace here", ctx).to_result()["message"] == "Try again later."


def test_approval_blocked_codes():
    assert ApprovalBlockedError(["sekretaris"], []).code == "APPROVAL_PENDING"
    rejected = ApprovalBlockedError(["sekretaris"], ["kepala_bidang"])
    assert rejected.code == "APPROVAL_REJECTED"
    assert rejected.http_status == 409


def test_memo_number_taken():
    err = MemoNumberTakenError("BA-001")
    assert err.code == "MEMO_NUMBER_TAKEN"
    assert "BA-001" in err.message


def test_access_denied_is_403():
    assert AccessDeniedError("Sekretaris").http_status == 403


def test_only_staff_may_transfer():
    assert Actor("u1", "Pegawai", 1).may_transfer
    assert not Actor("u2", "Kepala_Bidang", 1).may_transfer


def test_workflow_steps_are_ordered():
    assert [int(s) for s in WorkflowStep] == [1, 2, 3, 4, 5]
