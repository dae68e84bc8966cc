"""Notification Dispatcher — fire-and-forget in-app notifications to role holders.

Invariants:
    - NEVER raises: every failure is logged as NotificationError and swallowed
    - Uses its own short-lived DB session, so a failure cannot roll back workflow state
    - Role notifications optionally scoped to one organizational unit

Design Decisions:
    - Own session over the caller's: a notification insert failing must not
      poison the request transaction (user flow > notification delivery)
    - The returned count is informational only; no caller branches on it
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arsip.core.errors import NotificationError
from arsip.models.notification import Notification
from arsip.models.user import User

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Writes notification rows for every holder of a role."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def notify_role(
        self, role: str, title: str, message: str, link: str,
        category: str, unit_id: int | None = None,
    ) -> int:
        """Notify every holder of role (within unit_id when given). Returns count sent."""
        try:
            async with self._session_factory() as db:
                query = select(User.user_id).where(User.role == role)
                if unit_id is not None:
                    query = query.where(User.id_bidang_fkey == unit_id)
                user_ids = list((await db.execute(query)).scalars())
                if not user_ids:
                    logger.info(
                        "No recipients for role %s (unit=%s)", role, unit_id,
                    )
                    return 0
                db.add_all([
                    Notification(
                        user_id=uid, title=title, message=message,
                        link=link, related_entity=category,
                    )
                    for uid in user_ids
                ])
                await db.commit()
                return len(user_ids)
        except Exception as e:
            _log_failure(f"role {role}", e)
            return 0


def _log_failure(target: str, exc: Exception) -> None:
    err = NotificationError(f"Notification to {target} failed: {exc}")
    logger.warning(err.message, extra={"error_code": err.code})
