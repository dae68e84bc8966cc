"""Retention Calculator — active-period expiry and inactive-period derivation.

Invariants:
    - All functions are PURE: no IO, no clock access unless `today` is omitted
    - Dates are calendar dates; time of day never matters
    - Display format is DD-MM-YYYY, storage/comparison format is YYYY-MM-DD
    - Missing or unparseable dates never force a transfer (expiry is False)

Design Decisions:
    - Accept date objects or legacy display strings ("DD-MM-YYYY s.d. DD-MM-YYYY"):
      older rows carry the active period as free text
    - derive_inactive_period returns None instead of raising, also when the end
      year leaves the calendar: callers decide whether a missing period is fatal
"""

import logging
from dataclasses import dataclass
from datetime import date

from arsip.core.domain_types import PERIOD_SEPARATOR

logger = logging.getLogger(__name__)

DISPLAY_FORMAT = "%d-%m-%Y"


@dataclass(frozen=True)
class InactivePeriod:
    """Inactive-period date range derived from the active-period end."""
    start: date
    end: date

    def display(self) -> str:
        return format_period(self.start, self.end)


def format_dmy(value: date | None) -> str | None:
    """Render a date as DD-MM-YYYY."""
    if value is None:
        return None
    return value.strftime(DISPLAY_FORMAT)


def format_period(start: date | None, end: date | None) -> str:
    """Render a period for display; '-' when both bounds are missing."""
    first, last = format_dmy(start), format_dmy(end)
    if first and last:
        return f"{first}{PERIOD_SEPARATOR}{last}"
    return first or last or "-"


def parse_dmy(text: str | None) -> date | None:
    """Parse DD-MM-YYYY into a date. Returns None when malformed."""
    if not text:
        return None
    parts = text.strip().split("-")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        logger.warning("Unparseable period date: %r", text)
        return None


def parse_iso(text: str | None) -> date | None:
    """Parse YYYY-MM-DD into a date. Returns None when malformed."""
    if not text:
        return None
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def period_end(period: date | str | None) -> date | None:
    """Extract the end date of an active period.

    Accepts a date, a single DD-MM-YYYY string, or a
    "DD-MM-YYYY s.d. DD-MM-YYYY" range (the end is the last part).
    """
    if period is None or isinstance(period, date):
        return period
    parts = period.split(PERIOD_SEPARATOR.strip())
    return parse_dmy(parts[-1].strip()) if parts else None


def is_retention_expired(
    active_period_end: date | str | None, today: date | None = None,
) -> bool:
    """True iff today is strictly after the active-period end date."""
    end = period_end(active_period_end)
    if end is None:
        return False
    return (today or date.today()) > end


def derive_inactive_period(
    active_period_end: date | str | None, inactive_years: int | None,
) -> InactivePeriod | None:
    """Inactive period: Jan 1 of the year after the active end through
    Dec 31 of (start.year + inactive_years - 1).
    """
    end = period_end(active_period_end)
    if end is None or inactive_years is None:
        return None
    start_year = end.year + 1
    try:
        return InactivePeriod(
            start=date(start_year, 1, 1),
            end=date(start_year + inactive_years - 1, 12, 31),
        )
    except (ValueError, OverflowError):
        logger.warning("Inactive period out of calendar range: %s + %s years", end, inactive_years)
        return None
