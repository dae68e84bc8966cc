"""Transfer Route Helpers — actor resolution, workflow wiring, and SSE formatting.

Invariants:
    - The actor comes from the surrounding application's headers, never the body
    - Only workflow roles (Pegawai) reach the workflow; others get ACCESS_DENIED (403)
    - One TransferWorkflow per request, bound to the request session

Design Decisions:
    - Extracted from the route modules to keep them thin (ADR: ExMA import fan-out < 10)
    - Notifications use the manager's session factory, not the request session,
      so a failed notification cannot roll back the step change
"""

import json

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from arsip.config import get_settings
from arsip.core.domain_types import Actor
from arsip.core.errors import AccessDeniedError
from arsip.infrastructure import database
from arsip.infrastructure.database import get_db
from arsip.services.notification_dispatcher import NotificationDispatcher
from arsip.services.transfer_workflow import TransferWorkflow

# ADR: SSE headers prevent proxy/browser buffering of streamed events.
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def sse_line(event: dict) -> str:
    """Format one event as an SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"


def done_event(error: bool = False) -> dict:
    return {"type": "done", "data": {"error": error}}


async def get_actor(
    x_user_id: str = Header(..., max_length=64),
    x_user_role: str = Header(...),
    x_unit_id: int | None = Header(None),
) -> Actor:
    """Authenticated caller from request headers; raises ACCESS_DENIED for other roles."""
    actor = Actor(user_id=x_user_id, role=x_user_role, unit_id=x_unit_id)
    if not actor.may_transfer:
        raise AccessDeniedError(x_user_role)
    return actor


async def get_workflow(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> TransferWorkflow:
    notifier = NotificationDispatcher(database.get_session_factory())
    return TransferWorkflow(db, actor, notifier, get_settings())
