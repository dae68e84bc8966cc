"""Classification Resolver — looks up retention defaults by current or legacy code.

Invariants:
    - Lookups use the base code (suffix after the first "/" stripped)
    - Current code wins; the legacy code is consulted only for misses
    - A legacy hit reports the CURRENT code's data (legacy is an alias, never an entity)
    - A miss is not an error: callers fall back to edits or stored values

Design Decisions:
    - resolve_many batches lookups into two IN queries (current, then legacy) —
      one page of candidates or one migration batch resolves in two round trips
    - Result keyed by the requested base code, so callers index it with
      base_code(record.kode_klasifikasi) regardless of which table matched
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arsip.core.classification import ClassificationInfo, base_code, coerce_years
from arsip.models.classification import Classification

logger = logging.getLogger(__name__)


def _to_info(row: Classification) -> ClassificationInfo:
    return ClassificationInfo(
        code=row.kode_klasifikasi.strip(),
        label=row.label,
        active_years=coerce_years(row.aktif),
        inactive_years=coerce_years(row.inaktif),
        final_disposition=row.nasib_akhir,
    )


class ClassificationResolver:
    """Resolves classification codes against klasifikasi_arsip."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, code: str | None) -> ClassificationInfo | None:
        """Resolve one code. None when neither current nor legacy code matches."""
        key = base_code(code)
        if not key:
            return None
        return (await self.resolve_many([code])).get(key)

    async def resolve_many(
        self, codes: list[str | None],
    ) -> dict[str, ClassificationInfo]:
        """Resolve many codes at once, keyed by requested base code."""
        wanted = {base_code(c) for c in codes if base_code(c)}
        if not wanted:
            return {}

        resolved: dict[str, ClassificationInfo] = {}
        result = await self.db.execute(
            select(Classification).where(
                Classification.kode_klasifikasi.in_(wanted),
            ),
        )
        for row in result.scalars():
            resolved[row.kode_klasifikasi.strip()] = _to_info(row)

        missing = wanted - resolved.keys()
        if missing:
            result = await self.db.execute(
                select(Classification).where(
                    Classification.kode_klasifikasi_old.in_(missing),
                ),
            )
            for row in result.scalars():
                legacy = (row.kode_klasifikasi_old or "").strip()
                if legacy in missing and legacy not in resolved:
                    resolved[legacy] = _to_info(row)

        unresolved = wanted - resolved.keys()
        if unresolved:
            logger.debug("Unresolved classification codes: %s", sorted(unresolved))
        return resolved
