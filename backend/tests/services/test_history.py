"""History tests — listing, status classification, detail, deletion rules."""

from uuid import UUID, uuid4

from arsip.core.domain_types import HistoryFilter
from tests.services.helpers import walk_to_destination


async def _migrated(workflow, session_factory, record_id, memo_number) -> str:
    process_id = await walk_to_destination(workflow, session_factory, [record_id], memo_number)
    await workflow.update_destination("Gudang A", "B-12")
    assert (await workflow.advance())["current_step"] == 5
    return process_id


async def test_history_classifies_processes(workflow, seed, test_session_factory):
    done = await _migrated(workflow, test_session_factory, seed.expired, "BA-100")
    abandoned = (await workflow.open_process())["process_id"]
    pending = (await workflow.start_new())["process_id"]

    listing = await workflow.list_history()
    statuses = {row["process_id"]: row["status"] for row in listing["items"]}
    assert statuses == {done: "completed", abandoned: "abandoned", pending: "pending"}
    assert listing["pagination"]["total"] == 3


async def test_history_filters(workflow, seed, test_session_factory):
    done = await _migrated(workflow, test_session_factory, seed.expired, "BA-101")
    pending = (await workflow.open_process())["process_id"]

    only_pending = await workflow.list_history(HistoryFilter.PENDING)
    assert [r["process_id"] for r in only_pending["items"]] == [pending]
    only_done = await workflow.list_history(HistoryFilter.COMPLETED)
    assert [r["process_id"] for r in only_done["items"]] == [done]


async def test_history_search_by_memo_number(workflow, seed, test_session_factory):
    done = await _migrated(workflow, test_session_factory, seed.expired, "BA-2026/07")
    await workflow.open_process()
    found = await workflow.list_history(search="2026/07")
    assert [r["process_id"] for r in found["items"]] == [done]
    assert found["items"][0]["nomor_berita_acara"] == "BA-2026/07"


async def test_history_pagination(workflow, seed):
    await workflow.open_process()
    await workflow.start_new()
    await workflow.start_new()
    page = await workflow.list_history(page=2, page_size=2)
    assert len(page["items"]) == 1
    assert page["pagination"]["total"] == 3


async def test_detail_includes_inactive_records(workflow, seed, test_session_factory):
    done = await _migrated(workflow, test_session_factory, seed.expired, "BA-102")
    detail = await workflow.get_process(UUID(done))
    assert detail["history_status"] == "completed"
    assert detail["approval_status"]["both_approved"] is True
    [selected] = detail["selected_records"]
    assert selected["id_arsip_aktif"] == seed.expired
    [inactive] = detail["inactive_records"]
    assert inactive["nomor_berkas"] == 1
    assert inactive["jangka_simpan_aktif"] == "01-01-2021 s.d. 31-12-2023"
    assert inactive["jangka_simpan_inaktif"] == "01-01-2024 s.d. 31-12-2028"
    assert inactive["nomor_definitif_folder_dan_boks"] == "B-12"


async def test_detail_of_pending_process_has_no_inactive_records(workflow, seed):
    view = await workflow.open_process()
    await workflow.toggle_record(seed.current)
    detail = await workflow.get_process(UUID(view["process_id"]))
    assert detail["history_status"] == "pending"
    assert detail["inactive_records"] == []
    assert [r["id_arsip_aktif"] for r in detail["selected_records"]] == [seed.current]


async def test_detail_of_unknown_process(workflow, seed):
    assert (await workflow.get_process(uuid4()))["error_code"] == "RESOURCE_NOT_FOUND"


async def test_delete_pending_process(workflow, seed):
    process_id = (await workflow.open_process())["process_id"]
    result = await workflow.delete_process(UUID(process_id))
    assert result == {"status": "ok", "deleted": process_id}
    assert (await workflow.list_history())["items"] == []


async def test_completed_process_cannot_be_deleted(workflow, seed, test_session_factory):
    done = await _migrated(workflow, test_session_factory, seed.expired, "BA-103")
    result = await workflow.delete_process(UUID(done))
    assert result["error_code"] == "INVALID_TRANSITION"


async def test_abandoned_process_cannot_be_deleted(workflow, seed):
    abandoned = (await workflow.open_process())["process_id"]
    await workflow.start_new()
    result = await workflow.delete_process(UUID(abandoned))
    assert result["error_code"] == "INVALID_TRANSITION"
