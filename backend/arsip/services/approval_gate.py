"""Approval Gate — one-time approver notification and the bounded approval poll.

Invariants:
    - Approver notifications are sent once per process (approval_requested_at set)
    - Notification failure never blocks the workflow (dispatcher swallows errors)
    - The poll reads approval_status only; approvals are written externally
    - The poll ends as soon as both slots are Disetujui, the process leaves
      AwaitApproval, or the process disappears — never free-running

Design Decisions:
    - Poller is an async generator owned by its consumer (the SSE response):
      closing the connection cancels the generator, which cancels the sleep,
      so no timer outlives the client
    - Each tick uses a fresh session: identity-map caching would hide the
      external update otherwise
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arsip.core.domain_types import (
    Actor, ApproverRole, TRANSFER_NOTIFICATION_CATEGORY, WorkflowStep,
)
from arsip.core.repository_protocols import NotificationSink
from arsip.core.transfer_state import TransferState
from arsip.core.transfer_state_snapshot import (
    approval_status_to_dict, transfer_state_from_snapshot,
)
from arsip.models.transfer_process import TransferProcess

logger = logging.getLogger(__name__)

_APPROVAL_LINK = "/arsip/pemindahan/verifikasi/{slot}?process={process_id}"


class ApprovalGate:
    """Sends the approval request to both approver roles on first entry."""

    def __init__(self, notifier: NotificationSink):
        self.notifier = notifier

    def needs_request(self, process: TransferProcess) -> bool:
        return process.approval_requested_at is None

    def mark_requested(self, process: TransferProcess) -> None:
        process.approval_requested_at = datetime.now(timezone.utc)

    async def request_approval(
        self, process_id: UUID, state: TransferState, actor: Actor,
    ) -> None:
        """Notify the unit's department head and every secretary."""
        memo = state.berita_acara.nomor_berita_acara
        count = len(state.selected_ids)
        message = (
            f"Transfer memo {memo} ({count} records) from user {actor.user_id} "
            "awaits your approval."
        )
        await self.notifier.notify_role(
            ApproverRole.DEPARTMENT_HEAD.value,
            "Transfer approval requested",
            message,
            _APPROVAL_LINK.format(slot="kepala-bidang", process_id=process_id),
            TRANSFER_NOTIFICATION_CATEGORY,
            unit_id=actor.unit_id,
        )
        await self.notifier.notify_role(
            ApproverRole.SECRETARY.value,
            "Transfer approval requested",
            message,
            _APPROVAL_LINK.format(slot="sekretaris", process_id=process_id),
            TRANSFER_NOTIFICATION_CATEGORY,
        )
        logger.info(
            "Approval requested",
            extra={
                "process_id": process_id, "user_id": actor.user_id,
                "memo_number": memo, "record_count": count,
            },
        )


def approval_event(state: TransferState) -> dict:
    """SSE payload for one poll tick."""
    approval = state.approval_status
    return {
        "type": "approval_status",
        "data": {
            **approval_status_to_dict(approval),
            "both_approved": approval.both_approved,
            "rejected": approval.rejected_slots,
            "current_step": int(state.current_step),
        },
    }


class ApprovalPoller:
    """Bounded-interval poll of one process's approval status."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        process_id: UUID,
        interval: float = 10.0,
    ):
        self._session_factory = session_factory
        self.process_id = process_id
        self.interval = interval

    async def read_once(self) -> TransferState | None:
        async with self._session_factory() as db:
            process = await db.get(TransferProcess, self.process_id)
            if process is None:
                return None
            return transfer_state_from_snapshot(process.snapshot())

    async def updates(self) -> AsyncIterator[dict]:
        """Yield approval events until the gate opens or the step changes."""
        while True:
            state = await self.read_once()
            if state is None:
                yield {"type": "process_gone", "data": {"process_id": str(self.process_id)}}
                return
            yield approval_event(state)
            if (state.current_step != WorkflowStep.AWAIT_APPROVAL
                    or state.approval_status.both_approved):
                return
            await asyncio.sleep(self.interval)
