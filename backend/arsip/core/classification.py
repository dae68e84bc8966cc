"""Classification Codes — base-code extraction, dotted-numeric ordering, resolved info.

Invariants:
    - All functions are PURE: no IO
    - base_code strips everything after the first "/" and surrounding whitespace
    - Ordering compares dotted segments numerically; a missing segment counts as 0
    - Legacy codes never appear in ClassificationInfo.code — only the current code does

Design Decisions:
    - cmp_to_key over a tuple key: "000.5" and "000.5.0" must compare equal,
      which a padded tuple key cannot express without knowing the max depth
    - Non-numeric segments sort after numeric ones, lexically among themselves
"""

from dataclasses import dataclass
from functools import cmp_to_key


@dataclass(frozen=True)
class ClassificationInfo:
    """Resolved classification data (always keyed by the current code)."""
    code: str
    label: str | None
    active_years: int | None
    inactive_years: int | None
    final_disposition: str | None


def base_code(code: str | None) -> str:
    """Strip any suffix after the first '/' ("045/IV" -> "045")."""
    if not code:
        return ""
    return code.split("/", 1)[0].strip()


def coerce_years(value: object) -> int | None:
    """Retention durations arrive as int, numeric text, or junk."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _segment(text: str) -> tuple[int, int | str]:
    text = text.strip()
    if text.isdigit():
        return (0, int(text))
    return (1, text)


def _suffix(code: str | None) -> str:
    if not code or "/" not in code:
        return ""
    return code.split("/", 1)[1].strip()


def compare_codes(a: str | None, b: str | None) -> int:
    """Three-way compare of classification codes by dotted numeric segments."""
    seg_a = [_segment(s) for s in base_code(a).split(".") if s.strip()]
    seg_b = [_segment(s) for s in base_code(b).split(".") if s.strip()]
    for i in range(max(len(seg_a), len(seg_b))):
        x = seg_a[i] if i < len(seg_a) else (0, 0)
        y = seg_b[i] if i < len(seg_b) else (0, 0)
        if x != y:
            return -1 if x < y else 1
    # Same base code: fall back to the suffix ("045/I" before "045/IV")
    suffix_a, suffix_b = _suffix(a), _suffix(b)
    if suffix_a != suffix_b:
        return -1 if suffix_a < suffix_b else 1
    return 0


classification_sort_key = cmp_to_key(compare_codes)
