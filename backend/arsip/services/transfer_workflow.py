"""Transfer Workflow — the five-step wizard over a persisted TransferProcess.

Invariants:
    - Write-through: every mutation is persisted and committed before returning
    - One open process per user: opening loads the most recent incomplete one
      or creates a fresh step-1 process
    - Selection is re-validated on every open; vanished ids are pruned and the
      user is warned; an emptied selection forces step 1
    - Steps advance one at a time and only when the pure exit check passes;
      a failed check persists nothing
    - Exiting ComposeDestination runs the migration executor; the step only
      becomes COMPLETED when migration reports success, and advancing again
      afterwards is a no-op on the completed process
    - Only opening the workflow (or restarting) creates a process once one
      has finished; other operations never add a row
    - Every operation returns a result dict ({"status": "ok" | "error", ...}); nothing raises

Design Decisions:
    - Decisions in core/enforce_steps.py, IO here (ADR: ExMA impureim sandwich)
    - approval_status is never written back from here except when a process is
      created or reset to step 1: the verification workflow owns it and
      last-write-wins must not clobber it
    - Notifications go out after the step change is committed, so a slow or failing
      dispatcher cannot lose the transition
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arsip.config import Settings, get_settings
from arsip.core.classification import base_code
from arsip.core.domain_types import (
    Actor, CandidateFilterMode, HistoryFilter, MAX_RETENTION_YEARS, WorkflowStep,
)
from arsip.core.effective_fields import (
    EffectiveFields, missing_fields, resolve_effective_fields,
)
from arsip.core.enforce_steps import (
    check_editable_at, check_retreat, validate_advance,
)
from arsip.core.errors import (
    InvalidTransitionError, MemoNumberTakenError,
    ResourceNotFoundError, TransferValidationError,
)
from arsip.core.retention import derive_inactive_period, format_period
from arsip.core.repository_protocols import NotificationSink
from arsip.core.transfer_state import BeritaAcara, RecordEdit, TransferState
from arsip.core.transfer_state_snapshot import (
    approval_status_to_dict,
    berita_acara_to_dict,
    pemindahan_info_to_dict,
    process_status_to_dict,
    transfer_state_from_snapshot,
    transfer_state_to_snapshot,
)
from arsip.models.active_record import ActiveRecord
from arsip.models.inactive_record import InactiveRecord
from arsip.models.transfer_link import TransferLink
from arsip.models.transfer_memo import TransferMemo
from arsip.models.transfer_process import TransferProcess
from arsip.services.approval_gate import ApprovalGate
from arsip.services.candidate_selector import (
    CandidateFilters, CandidateSelector, to_uuids,
)
from arsip.services.classification_resolver import ClassificationResolver
from arsip.services.migration_executor import (
    MigrationExecutor, is_in_flight, persist_state,
)

logger = logging.getLogger(__name__)


def _normalize_id(record_id: str) -> str | None:
    ids = to_uuids([record_id])
    return str(ids[0]) if ids else None


class TransferWorkflow:
    """Drives one actor's transfer process."""

    def __init__(
        self,
        db: AsyncSession,
        actor: Actor,
        notifier: NotificationSink,
        settings: Settings | None = None,
        today: date | None = None,
    ):
        self.db = db
        self.actor = actor
        self.settings = settings or get_settings()
        self.today = today or date.today()
        self.resolver = ClassificationResolver(db)
        self.selector = CandidateSelector(db, self.resolver, self.today)
        self.gate = ApprovalGate(notifier)

    # ─── Loading ─────────────────────────────────────────────────

    def _log_extra(self, process: TransferProcess, **extra) -> dict:
        return {"process_id": process.id, "user_id": self.actor.user_id, **extra}

    async def _latest(self, open_only: bool = True) -> TransferProcess | None:
        query = select(TransferProcess).where(
            TransferProcess.user_id == self.actor.user_id,
        )
        if open_only:
            query = query.where(TransferProcess.is_completed.is_(False))
        result = await self.db.execute(
            query.order_by(
                TransferProcess.updated_at.desc(),
                TransferProcess.created_at.desc(),
            )
            .limit(1)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _owned(self, process_id: UUID) -> TransferProcess | None:
        result = await self.db.execute(
            select(TransferProcess)
            .where(TransferProcess.id == process_id)
            .where(TransferProcess.user_id == self.actor.user_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    def _apply_defaults(self, state: TransferState) -> TransferState:
        state.berita_acara.dasar = self.settings.default_legal_basis
        state.pemindahan_info.kategori_arsip = self.settings.default_archive_category
        return state

    async def _create(self) -> tuple[TransferProcess, TransferState]:
        state = self._apply_defaults(TransferState())
        process = TransferProcess(
            user_id=self.actor.user_id, id_bidang_fkey=self.actor.unit_id,
        )
        process.apply_snapshot(transfer_state_to_snapshot(state))
        self.db.add(process)
        await self.db.commit()
        logger.info("Transfer process created", extra=self._log_extra(process, step=1))
        return process, state

    async def _current(self) -> tuple[TransferProcess, TransferState]:
        """Open process, or a fresh one (opening the workflow)."""
        process = await self._latest()
        if process is None:
            return await self._create()
        return process, transfer_state_from_snapshot(process.snapshot())

    async def _working(self) -> tuple[TransferProcess, TransferState]:
        """Open process, else the most recent finished one.

        Only an actor with no process at all gets a new row here; after a
        finished transfer a new one starts via open_process or start_new.
        """
        process = await self._latest() or await self._latest(open_only=False)
        if process is None:
            return await self._create()
        return process, transfer_state_from_snapshot(process.snapshot())

    async def _save(self, process: TransferProcess, state: TransferState) -> None:
        persist_state(process, state)
        await self.db.commit()

    async def _revalidate(
        self, process: TransferProcess, state: TransferState,
    ) -> list[str]:
        """Prune vanished selections. Returns user-facing warnings."""
        if not state.selected_ids or state.migrated:
            return []
        gone = await self.selector.unresolvable_ids(state.selected_ids)
        if not gone:
            return []
        state.prune(set(state.selected_ids) - gone)
        if not state.selected_ids:
            state.reset()
            # a restarted selection needs a fresh approval round
            process.approval_status = approval_status_to_dict(state.approval_status)
            process.approval_requested_at = None
            warning = (
                "All previously selected records are no longer available. "
                "The transfer was returned to step 1."
            )
        else:
            warning = (
                f"{len(gone)} selected record(s) are no longer available and "
                "were removed from the selection."
            )
        await self._save(process, state)
        logger.warning(
            "Selection pruned on resume",
            extra=self._log_extra(process, record_count=len(gone), step=int(state.current_step)),
        )
        return [warning]

    # ─── Views ───────────────────────────────────────────────────

    async def _effective_fields(
        self, state: TransferState,
    ) -> tuple[list[ActiveRecord], dict[str, EffectiveFields], dict]:
        if state.is_completed:
            records = await self.selector.load_any(state.selected_ids)
        else:
            records = await self.selector.load_eligible(state.selected_ids)
        infos = await self.resolver.resolve_many([r.kode_klasifikasi for r in records])
        fields = {
            str(r.id_arsip_aktif): resolve_effective_fields(
                r, infos.get(base_code(r.kode_klasifikasi)),
                state.edit_for(str(r.id_arsip_aktif)),
                state.pemindahan_info.nomor_boks,
            )
            for r in records
        }
        return records, fields, infos

    async def _selected_rows(self, state: TransferState) -> list[dict]:
        records, fields, _ = await self._effective_fields(state)
        by_id = {str(r.id_arsip_aktif): r for r in records}
        rows = []
        for rid in state.selected_ids:
            record = by_id.get(rid)
            if record is None:
                continue
            f = fields[rid]
            period = derive_inactive_period(
                record.jangka_simpan_berakhir, f.masa_retensi_inaktif,
            )
            rows.append({
                "id_arsip_aktif": rid,
                "nomor_berkas": record.nomor_berkas,
                "kode_klasifikasi": record.kode_klasifikasi,
                "uraian_informasi": record.uraian_informasi,
                "kurun_waktu": record.kurun_waktu,
                "jumlah": record.jumlah,
                "jangka_simpan": record.jangka_simpan,
                "jenis_arsip": f.jenis_arsip,
                "masa_retensi_inaktif": f.masa_retensi_inaktif,
                "nasib_akhir": f.nasib_akhir,
                "nomor_boks": f.nomor_boks,
                "tingkat_perkembangan": f.tingkat_perkembangan,
                "jangka_simpan_inaktif": period.display() if period else "-",
                "missing_fields": missing_fields(f),
            })
        return rows

    async def _view(
        self, process: TransferProcess, state: TransferState,
        warnings: list[str] | None = None, **extra,
    ) -> dict:
        approval = approval_status_to_dict(state.approval_status)
        approval["both_approved"] = state.approval_status.both_approved
        return {
            "status": "ok",
            "process_id": str(process.id),
            "current_step": int(state.current_step),
            "selected_arsip_ids": list(state.selected_ids),
            "selected_records": await self._selected_rows(state),
            "berita_acara": berita_acara_to_dict(state.berita_acara),
            "pemindahan_info": pemindahan_info_to_dict(state.pemindahan_info),
            "approval_status": approval,
            "process_status": process_status_to_dict(state.process_status),
            "is_completed": state.is_completed,
            "warnings": warnings or [],
            **extra,
        }

    # ─── Open / restart ──────────────────────────────────────────

    async def open_process(self, process_id: UUID | None = None) -> dict:
        """Resume the given (or most recent) open process, creating one if needed."""
        if process_id is not None:
            process = await self._owned(process_id)
            if process is None:
                return ResourceNotFoundError("Transfer process", str(process_id)).to_result()
            state = transfer_state_from_snapshot(process.snapshot())
        else:
            process, state = await self._current()
        if state.is_completed:
            return await self._view(process, state)
        if state.migration_in_flight and not is_in_flight(process.id):
            state.mark_error("The previous migration was interrupted. Try again.")
            await self._save(process, state)
            logger.warning("Stale migration status cleared", extra=self._log_extra(process))
        warnings = await self._revalidate(process, state)
        return await self._view(process, state, warnings)

    async def current_process_id(self) -> UUID:
        process, _ = await self._working()
        return process.id

    async def start_new(self) -> dict:
        """Abandon the open process (if never migrated) and start a fresh one."""
        process = await self._latest()
        if process is not None:
            state = transfer_state_from_snapshot(process.snapshot())
            if is_in_flight(process.id):
                return InvalidTransitionError("Migration is in progress.").to_result()
            if not state.migrated:
                state.is_completed = True
                await self._save(process, state)
                logger.info("Transfer process abandoned", extra=self._log_extra(process))
        process, state = await self._create()
        return await self._view(process, state)

    # ─── Step 1: selection ───────────────────────────────────────

    async def list_candidates(
        self, search: str | None = None,
        mode: CandidateFilterMode = CandidateFilterMode.ALL,
        page: int = 1,
    ) -> dict:
        _, state = await self._working()
        filters = CandidateFilters(search, mode, list(state.selected_ids))
        result = await self.selector.list_candidates(
            self.actor.unit_id, filters, page, self.settings.candidate_page_size,
        )
        return {
            "status": "ok",
            **result.to_dict(),
            "selected_count": len(state.selected_ids),
        }

    async def next_active_sequence_number(self) -> dict:
        """Next free nomor_berkas among the actor unit's active records."""
        if self.actor.unit_id is None:
            return TransferValidationError(
                "An organizational unit is required.", "unit_id",
            ).to_result()
        number = await self.selector.next_active_sequence_number(self.actor.unit_id)
        return {"status": "ok", "unit_id": self.actor.unit_id, "nomor_berkas": number}

    async def toggle_record(self, record_id: str) -> dict:
        process, state = await self._working()
        error = check_editable_at(state, WorkflowStep.SELECT_RECORDS)
        if error:
            return error
        rid = _normalize_id(record_id)
        if rid is None or (not state.is_selected(rid) and not await self.selector.load_eligible(
            [rid], self.actor.unit_id,
        )):
            return ResourceNotFoundError("Candidate record", record_id).to_result()
        selected = state.toggle(rid)
        await self._save(process, state)
        return {
            "status": "ok", "record_id": rid, "selected": selected,
            "selected_arsip_ids": list(state.selected_ids),
        }

    async def select_page(
        self, select_all: bool, search: str | None = None,
        mode: CandidateFilterMode = CandidateFilterMode.ALL,
        page: int = 1,
    ) -> dict:
        """Select or deselect exactly the ids visible on one filtered page."""
        process, state = await self._working()
        error = check_editable_at(state, WorkflowStep.SELECT_RECORDS)
        if error:
            return error
        visible = await self.selector.visible_ids(
            self.actor.unit_id,
            CandidateFilters(search, mode, list(state.selected_ids)),
            page, self.settings.candidate_page_size,
        )
        if select_all:
            changed = state.select_many(visible)
        else:
            changed = state.deselect_many(visible)
        await self._save(process, state)
        return {
            "status": "ok", "changed": changed,
            "selected_arsip_ids": list(state.selected_ids),
        }

    # ─── Step 2: memo ────────────────────────────────────────────

    async def _memo_taken(self, memo_number: str, process_id: UUID) -> bool:
        """A memo bound to another process, or an unbound one that already migrated."""
        memo = (await self.db.execute(
            select(TransferMemo).where(
                TransferMemo.nomor_berita_acara == memo_number.strip(),
            ),
        )).scalar_one_or_none()
        if memo is None or memo.id_pemindahan_process_fkey == process_id:
            return False
        if memo.id_pemindahan_process_fkey is not None:
            return True
        migrated = await self.db.scalar(
            select(func.count()).select_from(InactiveRecord).where(
                InactiveRecord.id_berita_acara == memo.id,
            ),
        )
        return bool(migrated)

    async def update_memo(
        self, nomor_berita_acara: str, tanggal_berita_acara: str,
        keterangan: str = "", dasar: str | None = None,
    ) -> dict:
        process, state = await self._working()
        error = check_editable_at(state, WorkflowStep.COMPOSE_MEMO)
        if error:
            return error
        nomor = nomor_berita_acara.strip()
        if nomor and await self._memo_taken(nomor, process.id):
            return MemoNumberTakenError(nomor).to_result()
        state.berita_acara = BeritaAcara(
            nomor_berita_acara=nomor,
            tanggal_berita_acara=tanggal_berita_acara.strip(),
            keterangan=keterangan,
            dasar=dasar or state.berita_acara.dasar,
        )
        await self._save(process, state)
        return {"status": "ok", "berita_acara": berita_acara_to_dict(state.berita_acara)}

    # ─── Step 4: destination ─────────────────────────────────────

    async def update_destination(
        self, lokasi_simpan: str, nomor_boks: str,
        kategori_arsip: str | None = None, keterangan: str = "",
    ) -> dict:
        process, state = await self._working()
        error = check_editable_at(state, WorkflowStep.COMPOSE_DESTINATION)
        if error:
            return error
        info = state.pemindahan_info
        info.lokasi_simpan = lokasi_simpan.strip()
        info.nomor_boks = nomor_boks.strip()
        info.kategori_arsip = kategori_arsip or info.kategori_arsip
        info.keterangan = keterangan
        await self._save(process, state)
        return {"status": "ok", "pemindahan_info": pemindahan_info_to_dict(info)}

    async def update_record_edit(self, record_id: str, edit: RecordEdit) -> dict:
        process, state = await self._working()
        error = check_editable_at(state, WorkflowStep.COMPOSE_DESTINATION)
        if error:
            return error
        rid = _normalize_id(record_id)
        if rid is None or not state.is_selected(rid):
            return TransferValidationError(
                "Record is not part of this transfer.", "id_arsip_aktif", record_id,
            ).to_result()
        years = edit.masa_retensi_inaktif
        if years is not None and not 0 <= years <= MAX_RETENTION_YEARS:
            return TransferValidationError(
                f"Inactive retention must be between 0 and {MAX_RETENTION_YEARS} years.",
                "masa_retensi_inaktif", rid,
            ).to_result()
        state.set_edit(rid, edit)
        await self._save(process, state)
        return {
            "status": "ok",
            "record_id": rid,
            "arsip_edits": pemindahan_info_to_dict(state.pemindahan_info)["arsip_edits"],
        }

    # ─── Navigation ──────────────────────────────────────────────

    async def advance(self) -> dict:
        """Validate the current step's exit and move forward one step."""
        process, state = await self._working()
        if is_in_flight(process.id):
            return {"status": "ok", "migration": "in_progress", "current_step": int(state.current_step)}
        if state.migrated:
            # repeated advance after a successful migration lands on step 5
            return await self._view(process, state)

        fields_by_id = None
        if state.current_step == WorkflowStep.COMPOSE_DESTINATION:
            _, fields_by_id, _ = await self._effective_fields(state)
        error = validate_advance(state, fields_by_id)
        if error:
            return error

        match state.current_step:
            case WorkflowStep.COMPOSE_MEMO:
                nomor = state.berita_acara.nomor_berita_acara
                if await self._memo_taken(nomor, process.id):
                    return MemoNumberTakenError(nomor.strip()).to_result()
                return await self._enter_approval(process, state)
            case WorkflowStep.COMPOSE_DESTINATION:
                return await self._run_migration(process, state)
            case _:
                state.current_step = WorkflowStep(state.current_step + 1)
                await self._save(process, state)
                logger.info(
                    "Transfer advanced",
                    extra=self._log_extra(process, step=int(state.current_step)),
                )
                return await self._view(process, state)

    async def _enter_approval(
        self, process: TransferProcess, state: TransferState,
    ) -> dict:
        state.current_step = WorkflowStep.AWAIT_APPROVAL
        first_entry = self.gate.needs_request(process)
        if first_entry:
            self.gate.mark_requested(process)
        await self._save(process, state)
        logger.info("Transfer advanced", extra=self._log_extra(process, step=3))
        if first_entry:
            await self.gate.request_approval(process.id, state, self.actor)
        return await self._view(process, state)

    async def _run_migration(
        self, process: TransferProcess, state: TransferState,
    ) -> dict:
        executor = MigrationExecutor(
            self.db, self.resolver, self.selector, self.today,
        )
        result = await executor.execute(process, state, self.actor)
        if result["status"] != "ok":
            return result
        if result.get("migration") == "in_progress":
            return {**result, "current_step": int(state.current_step)}
        process = await self.db.get(TransferProcess, process.id)
        return await self._view(
            process, state,
            migration={k: v for k, v in result.items() if k != "status"},
        )

    async def retreat(self) -> dict:
        process, state = await self._working()
        error = check_retreat(state)
        if error:
            return error
        if is_in_flight(process.id):
            return InvalidTransitionError("Migration is in progress.").to_result()
        state.current_step = WorkflowStep(state.current_step - 1)
        await self._save(process, state)
        logger.info(
            "Transfer moved back",
            extra=self._log_extra(process, step=int(state.current_step)),
        )
        return await self._view(process, state)

    # ─── History ─────────────────────────────────────────────────

    @staticmethod
    def _history_status(state: TransferState) -> str:
        if state.migrated:
            return "completed"
        if state.is_completed:
            return "abandoned"
        return "pending"

    def _history_row(self, process: TransferProcess) -> dict:
        state = transfer_state_from_snapshot(process.snapshot())
        return {
            "process_id": str(process.id),
            "nomor_berita_acara": state.berita_acara.nomor_berita_acara or None,
            "tanggal_berita_acara": state.berita_acara.tanggal_berita_acara,
            "record_count": len(state.selected_ids),
            "current_step": int(state.current_step),
            "status": self._history_status(state),
            "process_status": process_status_to_dict(state.process_status),
            "updated_at": process.updated_at.isoformat() if process.updated_at else None,
        }

    async def list_history(
        self, filter_by: HistoryFilter = HistoryFilter.ALL,
        search: str | None = None, page: int = 1, page_size: int = 20,
    ) -> dict:
        query = (
            select(TransferProcess)
            .where(TransferProcess.user_id == self.actor.user_id)
            .order_by(TransferProcess.updated_at.desc())
        )
        match filter_by:
            case HistoryFilter.PENDING:
                query = query.where(TransferProcess.is_completed.is_(False))
            case HistoryFilter.COMPLETED:
                query = query.where(TransferProcess.is_completed.is_(True))
        processes = list((await self.db.execute(query)).scalars())
        rows = [self._history_row(p) for p in processes]
        term = (search or "").strip().lower()
        if term:
            rows = [
                r for r in rows
                if term in (r["nomor_berita_acara"] or "").lower()
            ]
        start = (max(page, 1) - 1) * page_size
        return {
            "status": "ok",
            "items": rows[start:start + page_size],
            "pagination": {"page": max(page, 1), "page_size": page_size, "total": len(rows)},
        }

    async def get_process(self, process_id: UUID) -> dict:
        """One process with its selected records and, once migrated, its inactive records."""
        process = await self._owned(process_id)
        if process is None:
            return ResourceNotFoundError("Transfer process", str(process_id)).to_result()
        state = transfer_state_from_snapshot(process.snapshot())
        records = await self.selector.load_any(state.selected_ids)
        by_id = {str(r.id_arsip_aktif): r for r in records}
        selected = [
            {
                "id_arsip_aktif": rid,
                "nomor_berkas": by_id[rid].nomor_berkas,
                "kode_klasifikasi": by_id[rid].kode_klasifikasi,
                "uraian_informasi": by_id[rid].uraian_informasi,
                "jangka_simpan": by_id[rid].jangka_simpan,
            }
            for rid in state.selected_ids if rid in by_id
        ]
        inactive = []
        if state.migrated:
            result = await self.db.execute(
                select(InactiveRecord)
                .join(
                    TransferLink,
                    TransferLink.id_arsip_inaktif_fkey == InactiveRecord.id_arsip_inaktif,
                )
                .where(TransferLink.id_pemindahan_process_fkey == process.id)
                .order_by(InactiveRecord.nomor_berkas),
            )
            inactive = [_inactive_row(r, by_id.get(str(r.id_arsip_aktif))) for r in result.scalars()]
        approval = approval_status_to_dict(state.approval_status)
        approval["both_approved"] = state.approval_status.both_approved
        return {
            **self._history_row(process),
            "status": "ok",
            "history_status": self._history_status(state),
            "berita_acara": berita_acara_to_dict(state.berita_acara),
            "pemindahan_info": pemindahan_info_to_dict(state.pemindahan_info),
            "approval_status": approval,
            "selected_records": selected,
            "inactive_records": inactive,
        }

    async def delete_process(self, process_id: UUID) -> dict:
        """Delete an incomplete process owned by the actor."""
        process = await self._owned(process_id)
        if process is None:
            return ResourceNotFoundError("Transfer process", str(process_id)).to_result()
        if process.is_completed:
            return InvalidTransitionError(
                "Completed transfers cannot be deleted.",
            ).to_result()
        if is_in_flight(process.id):
            return InvalidTransitionError("Migration is in progress.").to_result()
        await self.db.execute(
            delete(TransferProcess).where(TransferProcess.id == process.id),
        )
        await self.db.commit()
        logger.info("Transfer process deleted", extra=self._log_extra(process))
        return {"status": "ok", "deleted": str(process_id)}


def _inactive_row(record: InactiveRecord, source: ActiveRecord | None) -> dict:
    return {
        "id_arsip_inaktif": str(record.id_arsip_inaktif),
        "id_arsip_aktif": str(record.id_arsip_aktif),
        "nomor_berkas": record.nomor_berkas,
        "kode_klasifikasi": record.kode_klasifikasi,
        "jenis_arsip": record.jenis_arsip,
        "uraian_informasi": record.uraian_informasi,
        "kurun_waktu": record.kurun_waktu,
        "jangka_simpan_aktif": source.jangka_simpan if source else "-",
        "jangka_simpan_inaktif": format_period(record.inaktif_mulai, record.inaktif_berakhir),
        "masa_retensi": record.masa_retensi,
        "nasib_akhir": record.nasib_akhir,
        "nomor_definitif_folder_dan_boks": record.nomor_definitif_folder_dan_boks,
        "lokasi_simpan": record.lokasi_simpan,
        "status_persetujuan": record.status_persetujuan,
    }
