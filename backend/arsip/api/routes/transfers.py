"""Transfer Routes — the five-step transfer wizard over the actor's open process.

Invariants:
    - Every route delegates to TransferWorkflow; no business logic here
    - Error results become the standard error envelope via result_response
    - The approval stream ends when both approvals are in, the process leaves
      step 3, or the client disconnects

Design Decisions:
    - "/current" addresses the actor's open process: the client never has to
      track process ids to resume (ADR: one open process per user)
    - SSE over websockets: one-way status updates only, works through proxies
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from arsip.api.error_handlers import result_response
from arsip.api.routes.transfer_helpers import (
    SSE_HEADERS, done_event, get_workflow, sse_line,
)
from arsip.config import get_settings
from arsip.core.domain_types import CandidateFilterMode
from arsip.core.transfer_state import RecordEdit
from arsip.infrastructure import database
from arsip.schemas.transfer import (
    DestinationUpdate, MemoUpdate, PageSelectionRequest, RecordEditUpdate,
    ToggleRequest,
)
from arsip.services.approval_gate import ApprovalPoller
from arsip.services.transfer_workflow import TransferWorkflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.get("/current")
async def get_current(
    process_id: UUID | None = Query(None),
    workflow: TransferWorkflow = Depends(get_workflow),
):
    """Open (resume or create) the actor's transfer process."""
    return result_response(await workflow.open_process(process_id))


@router.post("/current/restart")
async def restart(workflow: TransferWorkflow = Depends(get_workflow)):
    """Abandon the open process and start a fresh one."""
    return result_response(await workflow.start_new())


@router.get("/candidates")
async def list_candidates(
    search: str | None = Query(None, max_length=200),
    filter_mode: CandidateFilterMode = Query(CandidateFilterMode.ALL, alias="filter"),
    page: int = Query(1, ge=1),
    workflow: TransferWorkflow = Depends(get_workflow),
):
    """One page of eligible active records."""
    return result_response(
        await workflow.list_candidates(search, filter_mode, page),
    )


@router.get("/active-sequence")
async def active_sequence(workflow: TransferWorkflow = Depends(get_workflow)):
    """Next sequence number for a new active record in the actor's unit."""
    return result_response(await workflow.next_active_sequence_number())


@router.post("/current/selection/toggle")
async def toggle_selection(
    body: ToggleRequest, workflow: TransferWorkflow = Depends(get_workflow),
):
    return result_response(await workflow.toggle_record(str(body.id_arsip_aktif)))


@router.post("/current/selection/page")
async def select_page(
    body: PageSelectionRequest,
    workflow: TransferWorkflow = Depends(get_workflow),
):
    """Select or deselect every record on one filtered page."""
    return result_response(await workflow.select_page(
        body.select, body.search, body.filter, body.page,
    ))


@router.put("/current/memo")
async def update_memo(
    body: MemoUpdate, workflow: TransferWorkflow = Depends(get_workflow),
):
    return result_response(await workflow.update_memo(
        body.nomor_berita_acara, body.tanggal_berita_acara,
        body.keterangan, body.dasar,
    ))


@router.put("/current/destination")
async def update_destination(
    body: DestinationUpdate, workflow: TransferWorkflow = Depends(get_workflow),
):
    return result_response(await workflow.update_destination(
        body.lokasi_simpan, body.nomor_boks, body.kategori_arsip, body.keterangan,
    ))


@router.put("/current/records/{record_id}/edit")
async def update_record_edit(
    record_id: UUID,
    body: RecordEditUpdate,
    workflow: TransferWorkflow = Depends(get_workflow),
):
    """Override derived fields of one selected record."""
    edit = RecordEdit(**body.model_dump())
    return result_response(await workflow.update_record_edit(str(record_id), edit))


@router.post("/current/advance")
async def advance(workflow: TransferWorkflow = Depends(get_workflow)):
    """Validate the current step and move forward (step 4 runs the migration)."""
    return result_response(await workflow.advance())


@router.post("/current/retreat")
async def retreat(workflow: TransferWorkflow = Depends(get_workflow)):
    return result_response(await workflow.retreat())


@router.get("/current/approval/stream")
async def stream_approval(workflow: TransferWorkflow = Depends(get_workflow)):
    """SSE stream of approval status while the process awaits approval."""
    process_id = await workflow.current_process_id()
    poller = ApprovalPoller(
        database.get_session_factory(), process_id,
        get_settings().approval_poll_interval_seconds,
    )

    async def event_generator():
        try:
            async for event in poller.updates():
                yield sse_line(event)
            yield sse_line(done_event())
        except asyncio.CancelledError:
            logger.info(
                "Client disconnected from approval stream (process=%s)", process_id,
            )
            return
        except Exception as e:
            logger.error(f"Approval stream failed: {e}", exc_info=True)
            yield sse_line(done_event(error=True))

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
