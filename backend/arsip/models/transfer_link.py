"""TransferLink ORM — marks an active record as already transferred.

Invariants:
    - At most one link per active record, ever (UNIQUE id_arsip_aktif_fkey)
    - Presence of a link is the sole source of truth for "already transferred"

Design Decisions:
    - Derived status by join instead of a flag on arsip_aktif: the two cannot
      drift apart; the unique index keeps the NOT IN exclusion cheap
"""

import uuid

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arsip.db.base import Base


class TransferLink(Base):
    """Active -> inactive link row, owned by a transfer process."""
    __tablename__ = "pemindahan_arsip_link"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    id_arsip_aktif_fkey: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("arsip_aktif.id_arsip_aktif"),
        nullable=False, unique=True, index=True,
    )
    id_arsip_inaktif_fkey: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("arsip_inaktif.id_arsip_inaktif"),
        nullable=False,
    )
    id_pemindahan_process_fkey: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pemindahan_process.id"),
        nullable=False,
    )
