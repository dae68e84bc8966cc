"""TransferProcess ORM — persisted state of one transfer wizard run.

Invariants:
    - At most one open (is_completed = False) process per user is used at a time;
      the workflow service picks the most recently updated one
    - JSON columns are written from core/transfer_state_snapshot.py only
    - approval_status is written by the external verification workflow
    - A completed process is never reopened

Design Decisions:
    - JSON columns per value object (not one blob): the verification workflow
      updates approval_status without touching the rest
    - approval_requested_at marks the one-time approver notification
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arsip.db.base import Base


class TransferProcess(Base):
    """Transfer process aggregate root."""
    __tablename__ = "pemindahan_process"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    id_bidang_fkey: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    selected_arsip_ids: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    berita_acara: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    pemindahan_info: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    approval_status: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    process_status: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    approval_requested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def snapshot(self) -> dict:
        """Column dict consumed by transfer_state_from_snapshot."""
        return {
            "current_step": self.current_step,
            "selected_arsip_ids": self.selected_arsip_ids,
            "berita_acara": self.berita_acara,
            "pemindahan_info": self.pemindahan_info,
            "approval_status": self.approval_status,
            "process_status": self.process_status,
            "is_completed": self.is_completed,
        }

    def apply_snapshot(self, data: dict) -> None:
        for key, value in data.items():
            setattr(self, key, value)
