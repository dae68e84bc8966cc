"""StorageLocation ORM — physical location of active records, owned by a unit.

Invariants:
    - id_bidang_fkey is the owning organizational unit; the candidate listing
      scopes active records to a unit through this table
"""

import uuid

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from arsip.db.base import Base


class StorageLocation(Base):
    """Cabinet / drawer / folder location of an active record."""
    __tablename__ = "lokasi_penyimpanan"

    id_lokasi: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    id_bidang_fkey: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True,
    )
    no_filing_cabinet: Mapped[str | None] = mapped_column(String(20), nullable=True)
    no_laci: Mapped[str | None] = mapped_column(String(20), nullable=True)
    no_folder: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def describe(self) -> str:
        return (
            f"Cabinet {self.no_filing_cabinet or '-'}, "
            f"drawer {self.no_laci or '-'}, folder {self.no_folder or '-'}"
        )
