"""Service test helpers — record factory, external approval writes, wizard walk-through.

Invariants:
    - set_approvals writes approval_status from its own session, like the
      verification workflow does; the workflow under test never sees the write
      until it reloads the process
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from arsip.core.domain_types import RecordApprovalStatus
from arsip.models import ActiveRecord, StorageLocation, TransferProcess
from arsip.services.transfer_workflow import TransferWorkflow

TODAY = date(2026, 3, 1)
STAFF_HEADERS = {"X-User-Id": "pegawai-1", "X-User-Role": "Pegawai", "X-Unit-Id": "1"}


@dataclass
class Seed:
    """Handles to the seeded rows (ids as strings, the way the wizard stores them)."""
    location: StorageLocation
    expired: str
    current: str
    legacy: str
    unapproved: str
    other_unit: str


def make_record(location: StorageLocation, **overrides) -> ActiveRecord:
    fields = {
        "nomor_berkas": 1,
        "kode_klasifikasi": "045/IV",
        "uraian_informasi": "Surat keputusan pengangkatan pegawai",
        "kurun_waktu": "2021",
        "jumlah": 1,
        "tingkat_perkembangan": "Asli",
        "jangka_simpan_mulai": date(2021, 1, 1),
        "jangka_simpan_berakhir": date(2023, 12, 31),
        "status_persetujuan": RecordApprovalStatus.APPROVED.value,
        "lokasi_penyimpanan_fkey": location.id_lokasi,
        "lokasi": location,
        "user_id": "pegawai-1",
    }
    fields.update(overrides)
    return ActiveRecord(**fields)


async def set_approvals(
    session_factory, process_id, kepala_bidang: str = "Disetujui",
    sekretaris: str = "Disetujui",
) -> None:
    """Write approval_status the way the verification workflow does."""
    async with session_factory() as db:
        process = await db.get(TransferProcess, UUID(str(process_id)))
        process.approval_status = {
            "kepala_bidang": {"status": kepala_bidang, "verified_by": "kabid-1", "verified_at": None},
            "sekretaris": {"status": sekretaris, "verified_by": "sekre-1", "verified_at": None},
        }
        await db.commit()


async def walk_to_destination(
    workflow: TransferWorkflow, session_factory, record_ids: list[str],
    memo_number: str = "BA-001",
) -> str:
    """Select records, fill the memo, get both approvals, land on step 4. Returns process id."""
    opened = await workflow.open_process()
    for rid in record_ids:
        assert (await workflow.toggle_record(rid))["status"] == "ok"
    assert (await workflow.advance())["current_step"] == 2
    await workflow.update_memo(memo_number, "2026-03-01", "Pemindahan rutin")
    assert (await workflow.advance())["current_step"] == 3
    await set_approvals(session_factory, opened["process_id"])
    assert (await workflow.advance())["current_step"] == 4
    return opened["process_id"]
