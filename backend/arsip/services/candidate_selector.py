"""Candidate Selector — lists active records eligible for transfer.

Invariants:
    - Eligible = in the actor's unit + status Disetujui + NOT linked in pemindahan_arsip_link
    - The "already linked" exclusion is a subquery, never a denormalized flag
    - Page-wide select/deselect only affects ids visible under the active filter
    - Rows on a page are ordered by classification code (dotted numeric compare)
    - Active-side sequence numbering also excludes linked records

Design Decisions:
    - Query ordered by nomor_berkas for stable paging; the page itself is then
      re-sorted by classification code, matching how the listing is read
    - Rows enriched with resolved classification data so the client never
      issues its own lookups
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from arsip.core.classification import (
    ClassificationInfo, base_code, classification_sort_key,
)
from arsip.core.domain_types import CandidateFilterMode, RecordApprovalStatus
from arsip.core.retention import is_retention_expired
from arsip.models.active_record import ActiveRecord
from arsip.models.storage_location import StorageLocation
from arsip.models.transfer_link import TransferLink
from arsip.services.classification_resolver import ClassificationResolver

logger = logging.getLogger(__name__)


@dataclass
class CandidateFilters:
    """Free-text search plus the tri-state listing filter."""
    search: str | None = None
    mode: CandidateFilterMode = CandidateFilterMode.ALL
    selected_ids: list[str] = field(default_factory=list)


@dataclass
class CandidatePage:
    items: list[dict]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size

    def to_dict(self) -> dict:
        return {
            "items": self.items,
            "pagination": {
                "page": self.page,
                "page_size": self.page_size,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }


def to_uuids(ids: list[str]) -> list[UUID]:
    """Parse id strings; malformed ids are dropped."""
    parsed = []
    for rid in ids:
        try:
            parsed.append(UUID(str(rid)))
        except ValueError:
            logger.warning("Ignoring malformed record id: %r", rid)
    return parsed


def linked_ids_subquery():
    return select(TransferLink.id_arsip_aktif_fkey)


def candidate_row(
    record: ActiveRecord,
    info: ClassificationInfo | None,
    selected: bool,
    today: date,
) -> dict:
    """Listing row for one candidate."""
    lokasi = record.lokasi
    return {
        "id_arsip_aktif": str(record.id_arsip_aktif),
        "nomor_berkas": record.nomor_berkas,
        "kode_klasifikasi": record.kode_klasifikasi,
        "uraian_informasi": record.uraian_informasi,
        "kurun_waktu": record.kurun_waktu,
        "jumlah": record.jumlah,
        "tingkat_perkembangan": record.tingkat_perkembangan,
        "jangka_simpan": record.jangka_simpan,
        "retention_expired": is_retention_expired(
            record.jangka_simpan_berakhir, today,
        ),
        "lokasi": lokasi.describe() if lokasi else None,
        "classification": {
            "code": info.code,
            "label": info.label,
            "aktif": info.active_years,
            "inaktif": info.inactive_years,
            "nasib_akhir": info.final_disposition,
        } if info else None,
        "selected": selected,
    }


class CandidateSelector:
    """Eligible active records for one organizational unit."""

    def __init__(
        self,
        db: AsyncSession,
        resolver: ClassificationResolver | None = None,
        today: date | None = None,
    ):
        self.db = db
        self.resolver = resolver or ClassificationResolver(db)
        self.today = today or date.today()

    def _eligible_query(self, unit_id: int | None) -> Select:
        query = (
            select(ActiveRecord)
            .where(
                ActiveRecord.status_persetujuan
                == RecordApprovalStatus.APPROVED.value,
            )
            .where(ActiveRecord.id_arsip_aktif.not_in(linked_ids_subquery()))
        )
        if unit_id is not None:
            query = query.join(
                StorageLocation,
                StorageLocation.id_lokasi == ActiveRecord.lokasi_penyimpanan_fkey,
            ).where(StorageLocation.id_bidang_fkey == unit_id)
        return query

    def _filtered_query(self, unit_id: int | None, filters: CandidateFilters) -> Select:
        query = self._eligible_query(unit_id)
        term = (filters.search or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.where(or_(
                ActiveRecord.kode_klasifikasi.ilike(pattern),
                ActiveRecord.uraian_informasi.ilike(pattern),
            ))
        match filters.mode:
            case CandidateFilterMode.EXPIRED:
                query = query.where(
                    ActiveRecord.jangka_simpan_berakhir.is_not(None),
                    ActiveRecord.jangka_simpan_berakhir < self.today,
                )
            case CandidateFilterMode.SELECTED:
                query = query.where(
                    ActiveRecord.id_arsip_aktif.in_(to_uuids(filters.selected_ids)),
                )
        return query

    async def _page_records(
        self, unit_id: int | None, filters: CandidateFilters,
        page: int, page_size: int,
    ) -> tuple[list[ActiveRecord], int]:
        query = self._filtered_query(unit_id, filters)
        total = await self.db.scalar(
            select(func.count()).select_from(query.subquery()),
        )
        result = await self.db.execute(
            query.order_by(ActiveRecord.nomor_berkas, ActiveRecord.id_arsip_aktif)
            .limit(page_size)
            .offset((max(page, 1) - 1) * page_size),
        )
        records = sorted(
            result.scalars().all(),
            key=lambda r: classification_sort_key(r.kode_klasifikasi),
        )
        return records, total or 0

    async def list_candidates(
        self, unit_id: int | None, filters: CandidateFilters,
        page: int = 1, page_size: int = 10,
    ) -> CandidatePage:
        """One page of enriched candidate rows."""
        records, total = await self._page_records(unit_id, filters, page, page_size)
        infos = await self.resolver.resolve_many(
            [r.kode_klasifikasi for r in records],
        )
        selected = set(filters.selected_ids)
        items = [
            candidate_row(
                r, infos.get(base_code(r.kode_klasifikasi)),
                str(r.id_arsip_aktif) in selected, self.today,
            )
            for r in records
        ]
        return CandidatePage(items, max(page, 1), page_size, total)

    async def visible_ids(
        self, unit_id: int | None, filters: CandidateFilters,
        page: int = 1, page_size: int = 10,
    ) -> list[str]:
        """Ids on the given page under the given filter, in display order."""
        records, _ = await self._page_records(unit_id, filters, page, page_size)
        return [str(r.id_arsip_aktif) for r in records]

    async def load_eligible(
        self, ids: list[str], unit_id: int | None = None,
    ) -> list[ActiveRecord]:
        """Eligible records among ids (missing, unapproved or linked ones dropped)."""
        uuids = to_uuids(ids)
        if not uuids:
            return []
        result = await self.db.execute(
            self._eligible_query(unit_id).where(
                ActiveRecord.id_arsip_aktif.in_(uuids),
            ),
        )
        return list(result.scalars().all())

    async def load_any(self, ids: list[str]) -> list[ActiveRecord]:
        """Records by id regardless of eligibility (history views)."""
        uuids = to_uuids(ids)
        if not uuids:
            return []
        result = await self.db.execute(
            select(ActiveRecord).where(ActiveRecord.id_arsip_aktif.in_(uuids)),
        )
        return list(result.scalars().all())

    async def unresolvable_ids(self, ids: list[str]) -> set[str]:
        """Selected ids that were deleted or transferred elsewhere since selection."""
        uuids = to_uuids(ids)
        if not uuids:
            return set(ids)
        result = await self.db.execute(
            select(ActiveRecord.id_arsip_aktif)
            .where(ActiveRecord.id_arsip_aktif.in_(uuids))
            .where(ActiveRecord.id_arsip_aktif.not_in(linked_ids_subquery())),
        )
        alive = {str(rid) for rid in result.scalars()}
        return {rid for rid in ids if rid not in alive}

    async def next_active_sequence_number(self, unit_id: int) -> int:
        """max(nomor_berkas) + 1 over the unit's unlinked active records; 1 when none."""
        current = await self.db.scalar(
            select(func.max(ActiveRecord.nomor_berkas))
            .join(
                StorageLocation,
                StorageLocation.id_lokasi == ActiveRecord.lokasi_penyimpanan_fkey,
            )
            .where(StorageLocation.id_bidang_fkey == unit_id)
            .where(ActiveRecord.id_arsip_aktif.not_in(linked_ids_subquery())),
        )
        return (current or 0) + 1
