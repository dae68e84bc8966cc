"""History Routes — the actor's past and pending transfer processes.

Invariants:
    - Only the actor's own processes are listed, shown, or deleted
    - Completed processes cannot be deleted (INVALID_TRANSITION, 409)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from arsip.api.error_handlers import result_response
from arsip.api.routes.transfer_helpers import get_workflow
from arsip.core.domain_types import HistoryFilter
from arsip.services.transfer_workflow import TransferWorkflow

router = APIRouter(prefix="/api/v1/transfers/history", tags=["history"])


@router.get("")
async def list_history(
    filter_by: HistoryFilter = Query(HistoryFilter.ALL, alias="filter"),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    workflow: TransferWorkflow = Depends(get_workflow),
):
    """List processes, most recently updated first."""
    return result_response(
        await workflow.list_history(filter_by, search, page, page_size),
    )


@router.get("/{process_id}")
async def get_process(
    process_id: UUID, workflow: TransferWorkflow = Depends(get_workflow),
):
    """One process with its selected and (once migrated) inactive records."""
    return result_response(await workflow.get_process(process_id))


@router.delete("/{process_id}")
async def delete_process(
    process_id: UUID, workflow: TransferWorkflow = Depends(get_workflow),
):
    return result_response(await workflow.delete_process(process_id))
