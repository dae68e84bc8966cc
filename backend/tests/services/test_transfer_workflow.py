"""Transfer workflow tests — open/resume, selection, memo, navigation, pruning.

Invariants covered:
    - One open process per user; reopening resumes it from the database
    - Only eligible records of the actor's unit can be selected
    - Edits are only accepted on their own step
    - A failed exit check changes nothing
    - Vanished selections are pruned with a warning; an emptied selection
      sends the process back to step 1
"""

from uuid import UUID

from sqlalchemy import delete

from arsip.core.domain_types import Actor
from arsip.core.transfer_state import RecordEdit
from arsip.models import ActiveRecord, TransferProcess
from arsip.services.transfer_workflow import TransferWorkflow
from tests.services.helpers import TODAY, make_record, set_approvals


async def test_open_creates_step_one_process(workflow, seed):
    view = await workflow.open_process()
    assert view["status"] == "ok"
    assert view["current_step"] == 1
    assert view["selected_arsip_ids"] == []
    assert view["pemindahan_info"]["kategori_arsip"] == "Arsip Konvensional"
    assert view["approval_status"]["both_approved"] is False


async def test_open_twice_resumes_same_process(workflow, seed):
    first = await workflow.open_process()
    second = await workflow.open_process()
    assert first["process_id"] == second["process_id"]


async def test_resume_from_fresh_session(
    workflow, seed, actor, notifier, test_session_factory,
):
    opened = await workflow.open_process()
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("BA-007", "2026-03-01", "catatan")

    async with test_session_factory() as db:
        resumed = await TransferWorkflow(db, actor, notifier, today=TODAY).open_process()
    assert resumed["process_id"] == opened["process_id"]
    assert resumed["current_step"] == 2
    assert resumed["selected_arsip_ids"] == [seed.expired]
    assert resumed["berita_acara"]["nomor_berita_acara"] == "BA-007"


async def test_toggle_selects_and_deselects(workflow, seed):
    assert (await workflow.toggle_record(seed.expired))["selected"] is True
    result = await workflow.toggle_record(seed.expired)
    assert result["selected"] is False
    assert result["selected_arsip_ids"] == []


async def test_toggle_refuses_ineligible_records(workflow, seed):
    for rid in (seed.unapproved, seed.other_unit, "not-a-uuid"):
        result = await workflow.toggle_record(rid)
        assert result["error_code"] == "RESOURCE_NOT_FOUND"


async def test_select_page_selects_only_visible(workflow, seed):
    result = await workflow.select_page(True, search="laporan")
    assert result["changed"] == 2
    assert set(result["selected_arsip_ids"]) == {seed.current, seed.legacy}
    result = await workflow.select_page(False, search="laporan")
    assert result["selected_arsip_ids"] == []


async def test_advance_without_selection_fails_and_stays(workflow, seed):
    result = await workflow.advance()
    assert result["error_code"] == "VALIDATION_ERROR"
    assert (await workflow.open_process())["current_step"] == 1


async def test_memo_edit_refused_outside_step_two(workflow, seed):
    result = await workflow.update_memo("BA-001", "2026-03-01")
    assert result["error_code"] == "INVALID_TRANSITION"


async def test_selection_frozen_after_step_one(workflow, seed):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    result = await workflow.toggle_record(seed.current)
    assert result["error_code"] == "INVALID_TRANSITION"


async def test_memo_requires_number_and_date(workflow, seed):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("", "2026-03-01")
    assert (await workflow.advance())["field"] == "nomor_berita_acara"
    await workflow.update_memo("BA-001", "03/01/2026")
    assert (await workflow.advance())["field"] == "tanggal_berita_acara"


async def test_retreat_and_forward(workflow, seed):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    back = await workflow.retreat()
    assert back["current_step"] == 1
    assert (await workflow.retreat())["error_code"] == "INVALID_TRANSITION"


async def test_record_edit_only_for_selected_records(
    workflow, seed, test_session_factory,
):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("BA-002", "2026-03-01")
    process_id = (await workflow.advance())["process_id"]
    await set_approvals(test_session_factory, process_id)
    assert (await workflow.advance())["current_step"] == 4

    result = await workflow.update_record_edit(seed.current, RecordEdit(nomor_boks="B-1"))
    assert result["error_code"] == "VALIDATION_ERROR"

    result = await workflow.update_record_edit(
        seed.expired, RecordEdit(masa_retensi_inaktif=1, nomor_boks="B-9"),
    )
    assert result["status"] == "ok"
    view = await workflow.open_process()
    [row] = view["selected_records"]
    assert row["masa_retensi_inaktif"] == 1
    assert row["nomor_boks"] == "B-9"
    assert row["jangka_simpan_inaktif"] == "01-01-2024 s.d. 31-12-2024"
    assert row["missing_fields"] == []


async def test_negative_years_rejected(workflow, seed, test_session_factory):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("BA-003", "2026-03-01")
    process_id = (await workflow.advance())["process_id"]
    await set_approvals(test_session_factory, process_id)
    await workflow.advance()
    result = await workflow.update_record_edit(seed.expired, RecordEdit(masa_retensi_inaktif=-2))
    assert result["field"] == "masa_retensi_inaktif"


async def test_vanished_record_pruned_with_warning(workflow, seed, test_db):
    await workflow.toggle_record(seed.expired)
    await workflow.toggle_record(seed.current)
    await test_db.execute(
        delete(ActiveRecord).where(ActiveRecord.id_arsip_aktif == UUID(seed.current)),
    )
    await test_db.commit()

    view = await workflow.open_process()
    assert view["selected_arsip_ids"] == [seed.expired]
    assert len(view["warnings"]) == 1


async def test_emptied_selection_returns_to_step_one(workflow, seed, test_db):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("BA-004", "2026-03-01")
    process_id = (await workflow.advance())["process_id"]
    await test_db.execute(
        delete(ActiveRecord).where(ActiveRecord.id_arsip_aktif == UUID(seed.expired)),
    )
    await test_db.commit()

    view = await workflow.open_process()
    assert view["current_step"] == 1
    assert view["selected_arsip_ids"] == []
    assert "step 1" in view["warnings"][0]
    assert view["berita_acara"]["nomor_berita_acara"] == "BA-004"
    process = await test_db.get(TransferProcess, UUID(process_id))
    assert process.approval_requested_at is None


async def test_open_by_id_of_someone_else_is_not_found(workflow, seed, test_db):
    other = TransferProcess(user_id="pegawai-2", selected_arsip_ids=[])
    test_db.add(other)
    await test_db.commit()
    result = await workflow.open_process(other.id)
    assert result["error_code"] == "RESOURCE_NOT_FOUND"


async def test_partial_prune_keeps_current_step(workflow, seed, test_db):
    for rid in (seed.expired, seed.current, seed.legacy):
        await workflow.toggle_record(rid)
    assert (await workflow.advance())["current_step"] == 2
    await test_db.execute(
        delete(ActiveRecord).where(ActiveRecord.id_arsip_aktif == UUID(seed.current)),
    )
    await test_db.commit()

    view = await workflow.open_process()
    assert view["current_step"] == 2
    assert view["selected_arsip_ids"] == [seed.expired, seed.legacy]
    assert len(view["warnings"]) == 1
    process = await test_db.get(TransferProcess, UUID(view["process_id"]))
    assert process.selected_arsip_ids == [seed.expired, seed.legacy]


async def test_retention_override_above_limit_rejected(
    workflow, seed, test_session_factory,
):
    await workflow.toggle_record(seed.expired)
    await workflow.advance()
    await workflow.update_memo("BA-005", "2026-03-01")
    process_id = (await workflow.advance())["process_id"]
    await set_approvals(test_session_factory, process_id)
    await workflow.advance()

    result = await workflow.update_record_edit(
        seed.expired, RecordEdit(masa_retensi_inaktif=9000),
    )
    assert result["error_code"] == "VALIDATION_ERROR"
    assert result["field"] == "masa_retensi_inaktif"
    view = await workflow.open_process()
    assert view["selected_records"][0]["masa_retensi_inaktif"] == 5


async def test_out_of_range_stored_retention_still_opens(workflow, seed, test_db):
    odd = make_record(
        seed.location, nomor_berkas=9, kode_klasifikasi="999.9",
        jenis_arsip="Memo", masa_retensi_inaktif=9000, nasib_akhir="Musnah",
    )
    test_db.add(odd)
    await test_db.commit()
    await workflow.toggle_record(str(odd.id_arsip_aktif))

    view = await workflow.open_process()
    [row] = view["selected_records"]
    assert row["jangka_simpan_inaktif"] == "-"
    assert "masa_retensi_inaktif" in row["missing_fields"]


async def test_next_active_sequence_number_for_actor_unit(workflow, seed, test_db, notifier):
    result = await workflow.next_active_sequence_number()
    assert result == {"status": "ok", "unit_id": 1, "nomor_berkas": 5}

    unitless = TransferWorkflow(
        test_db, Actor(user_id="pegawai-1", role="Pegawai"), notifier, today=TODAY,
    )
    result = await unitless.next_active_sequence_number()
    assert result["error_code"] == "VALIDATION_ERROR"
    assert result["field"] == "unit_id"
