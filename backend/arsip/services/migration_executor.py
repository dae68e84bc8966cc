"""Migration Executor — creates the inactive batch, links, and completes the process.

Invariants:
    - Idempotent per memo number: a memo that already has inactive records
      completes the process without writing anything new
    - A memo number bound to another process is MemoNumberTakenError
    - The memo row is committed on its own BEFORE the batch; an orphaned memo
      left by a failed batch is what the idempotency lookup finds on retry
    - Inactive rows, links, memo Selesai, and process completion commit in ONE
      transaction; any failure rolls all of it back
    - Inserted count is re-checked against the plan before committing
    - NEVER raises: failures persist process_status = error with the message and
      return an error result
    - At most one run per process at a time in this worker (_in_flight)

Design Decisions:
    - Whole-call retry: the user re-runs the executor from the top; the memo
      lookup makes step 1/2 skip redundant work (ADR: no per-step retry)
    - _in_flight is module-level: a deliberate exception to the no-global-state
      rule, like single-process uvicorn itself; a persisted "processing" status
      without a registry entry is stale and may be re-run
"""

import logging
from dataclasses import asdict
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arsip.core.domain_types import Actor, MemoStatus, WorkflowStep
from arsip.core.errors import (
    ArsipError, ConcurrencyError, ErrorContext, ExecutionError, MemoNumberTakenError,
)
from arsip.core.migration_plan import plan_inactive_records
from arsip.core.transfer_state import TransferState
from arsip.core.transfer_state_snapshot import transfer_state_to_snapshot
from arsip.models.inactive_record import InactiveRecord
from arsip.models.transfer_link import TransferLink
from arsip.models.transfer_memo import TransferMemo
from arsip.models.transfer_process import TransferProcess
from arsip.services.candidate_selector import CandidateSelector
from arsip.services.classification_resolver import ClassificationResolver

logger = logging.getLogger(__name__)

# ADR: in-worker registry of running migrations (single-process uvicorn)
_in_flight: set[UUID] = set()


def is_in_flight(process_id: UUID) -> bool:
    return process_id in _in_flight


def in_flight_count() -> int:
    return len(_in_flight)


def persist_state(process: TransferProcess, state: TransferState) -> None:
    """Write the workflow-owned columns (approval_status is external)."""
    snapshot = transfer_state_to_snapshot(state)
    snapshot.pop("approval_status")
    process.apply_snapshot(snapshot)


class MigrationExecutor:
    """Runs the active -> inactive migration for one process."""

    def __init__(
        self,
        db: AsyncSession,
        resolver: ClassificationResolver | None = None,
        selector: CandidateSelector | None = None,
        today: date | None = None,
    ):
        self.db = db
        self.today = today or date.today()
        self.resolver = resolver or ClassificationResolver(db)
        self.selector = selector or CandidateSelector(db, self.resolver, self.today)

    async def execute(
        self, process: TransferProcess, state: TransferState, actor: Actor,
    ) -> dict:
        """Run the migration. Returns a result dict, never raises."""
        process_id = process.id
        if process_id in _in_flight:
            return {"status": "ok", "migration": "in_progress", "process_id": str(process_id)}
        _in_flight.add(process_id)
        memo_number = state.berita_acara.nomor_berita_acara.strip()
        log_extra = {
            "process_id": process_id, "user_id": actor.user_id,
            "memo_number": memo_number,
        }
        try:
            memo = await self._find_memo(memo_number)
            if memo is not None:
                self._check_memo_owner(memo, process_id, memo_number)
                if await self._count_inactive(memo.id) > 0:
                    if memo.id_pemindahan_process_fkey is None:
                        raise MemoNumberTakenError(memo_number)
                    return await self._complete_already_migrated(
                        process, state, log_extra,
                    )

            state.mark_processing()
            persist_state(process, state)
            await self.db.commit()

            if memo is None:
                memo = await self._create_memo(process_id, state, actor, memo_number)
            elif memo.id_pemindahan_process_fkey is None:
                memo.id_pemindahan_process_fkey = process_id

            count = await self._insert_batch(process, state, memo, actor)
            logger.info(
                "Migration completed", extra={**log_extra, "record_count": count},
            )
            return {
                "status": "ok",
                "migration": "completed",
                "already_migrated": False,
                "record_count": count,
                "memo_id": str(memo.id),
            }
        except ArsipError as e:
            return await self._fail(process_id, state, e, log_extra)
        except Exception as e:
            logger.error(
                f"Migration crashed: {e}", exc_info=True, extra=log_extra,
            )
            return await self._fail(
                process_id, state,
                ExecutionError(
                    "Migration failed. Nothing was transferred; try again.",
                    ErrorContext(process_id=str(process_id), debug_info={"cause": str(e)}),
                ),
                log_extra,
            )
        finally:
            _in_flight.discard(process_id)

    # ─── Memo ────────────────────────────────────────────────────

    async def _find_memo(self, memo_number: str) -> TransferMemo | None:
        result = await self.db.execute(
            select(TransferMemo).where(
                TransferMemo.nomor_berita_acara == memo_number,
            ),
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _check_memo_owner(
        memo: TransferMemo, process_id: UUID, memo_number: str,
    ) -> None:
        owner = memo.id_pemindahan_process_fkey
        if owner is not None and owner != process_id:
            raise MemoNumberTakenError(memo_number)

    async def _count_inactive(self, memo_id: UUID) -> int:
        return await self.db.scalar(
            select(func.count()).select_from(InactiveRecord).where(
                InactiveRecord.id_berita_acara == memo_id,
            ),
        ) or 0

    async def _create_memo(
        self, process_id: UUID, state: TransferState, actor: Actor,
        memo_number: str,
    ) -> TransferMemo:
        ba = state.berita_acara
        memo = TransferMemo(
            nomor_berita_acara=memo_number,
            tanggal_berita_acara=date.fromisoformat(ba.tanggal_berita_acara.strip()),
            dasar=ba.dasar,
            keterangan=ba.keterangan,
            user_id=actor.user_id,
            id_pemindahan_process_fkey=process_id,
            jumlah_arsip=len(state.selected_ids),
            status=MemoStatus.PENDING.value,
        )
        self.db.add(memo)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise MemoNumberTakenError(memo_number)
        return memo

    # ─── Batch ───────────────────────────────────────────────────

    async def _insert_batch(
        self, process: TransferProcess, state: TransferState,
        memo: TransferMemo, actor: Actor,
    ) -> int:
        records = await self.selector.load_eligible(state.selected_ids)
        if len(records) != len(state.selected_ids):
            raise ConcurrencyError(
                "Some selected records are no longer available. "
                "Reload the transfer to refresh the selection.",
                code="SELECTION_STALE",
            )
        classifications = await self.resolver.resolve_many(
            [r.kode_klasifikasi for r in records],
        )
        plan = plan_inactive_records(records, classifications, state, self.today)

        rows = [
            InactiveRecord(**asdict(p), user_id=actor.user_id, id_berita_acara=memo.id)
            for p in plan
        ]
        self.db.add_all(rows)
        await self.db.flush()
        inserted = await self._count_inactive(memo.id)
        if inserted != len(plan):
            raise ExecutionError(
                f"Inserted {inserted} inactive records, expected {len(plan)}.",
            )

        self.db.add_all([
            TransferLink(
                id_arsip_aktif_fkey=row.id_arsip_aktif,
                id_arsip_inaktif_fkey=row.id_arsip_inaktif,
                id_pemindahan_process_fkey=process.id,
            )
            for row in rows
        ])
        memo.status = MemoStatus.COMPLETED.value
        memo.jumlah_arsip = len(rows)
        state.mark_completed()
        persist_state(process, state)
        await self.db.commit()
        return len(rows)

    async def _complete_already_migrated(
        self, process: TransferProcess, state: TransferState, log_extra: dict,
    ) -> dict:
        state.mark_completed()
        persist_state(process, state)
        await self.db.commit()
        logger.info("Memo already migrated; process completed", extra=log_extra)
        return {"status": "ok", "migration": "completed", "already_migrated": True}

    # ─── Failure ─────────────────────────────────────────────────

    async def _fail(
        self, process_id: UUID, state: TransferState, error: ArsipError,
        log_extra: dict,
    ) -> dict:
        await self.db.rollback()
        state.current_step = WorkflowStep.COMPOSE_DESTINATION
        state.is_completed = False
        state.mark_error(error.message)
        logger.warning(
            f"Migration failed: {error.message}",
            extra={**log_extra, "error_code": error.code},
        )
        try:
            process = await self.db.get(TransferProcess, process_id)
            if process is not None:
                persist_state(process, state)
                await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to persist migration error: {e}", exc_info=True)
        return error.to_result()
