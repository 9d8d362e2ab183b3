"""
Field extractors: turn raw text fragments into typed values.

None of these raise on malformed input. Unusable text gives an empty week
list, ``None`` for a period range, or ``None`` for a date, and the caller
decides whether the record is still worth keeping.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
#  Week sets
# ──────────────────────────────────────────────────────────────────

# "第1-10周", "第1,3,5周", "第2-16(双)周"
_WEEK_SPAN_RE = re.compile(r"第(.*?)[周(（]")
_LEADING_INT_RE = re.compile(r"\s*(\d+)")

WEEK_EVERY = 0
WEEK_ODD = 1
WEEK_EVEN = 2


def _leading_int(token: str) -> int | None:
    m = _LEADING_INT_RE.match(token)
    return int(m.group(1)) if m else None


def parse_weeks(text: str | None) -> List[int]:
    """
    Parse delimited week text like '第1-10周' or '第1,3,5周' into an
    ascending, duplicate-free list of week numbers.
    """
    if not text:
        return []
    m = _WEEK_SPAN_RE.search(text)
    if not m:
        return []

    weeks: set[int] = set()
    for token in re.split(r"[,，]", m.group(1)):
        parts = token.split("-")
        if len(parts) == 2:
            start = _leading_int(parts[0])
            end = _leading_int(parts[1])
            if start is None or end is None:
                continue
            if start > end:
                start, end = end, start
            weeks.update(range(start, end + 1))
        elif len(parts) == 1:
            week = _leading_int(parts[0])
            if week is not None:
                weeks.add(week)
    return sorted(w for w in weeks if w > 0)


def parse_week_bitmask(mask: str | None) -> List[int]:
    """'0110' -> [2, 3]: the 1-based position of every '1'."""
    if not mask:
        return []
    return [i + 1 for i, ch in enumerate(str(mask)) if ch == "1"]


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def expand_week_range(start: Any, end: Any, kind: Any) -> List[int]:
    """
    Weeks in [start, end] filtered by parity kind:
    0 = every week, 1 = odd weeks only, 2 = even weeks only.
    """
    first = _to_int(start)
    last = _to_int(end)
    kind = _to_int(kind)
    if first is None or last is None or kind not in (WEEK_EVERY, WEEK_ODD, WEEK_EVEN):
        return []

    weeks: List[int] = []
    for week in range(max(first, 1), last + 1):
        if kind == WEEK_EVERY:
            weeks.append(week)
        elif kind == WEEK_ODD and week % 2 == 1:
            weeks.append(week)
        elif kind == WEEK_EVEN and week % 2 == 0:
            weeks.append(week)
    return weeks


# ──────────────────────────────────────────────────────────────────
#  Period ranges
# ──────────────────────────────────────────────────────────────────

_SECTION_RANGE_RE = re.compile(r"(\d+)\s*-\s*(\d+)")
_NUMBER_RE = re.compile(r"\d+")


def parse_sections(text: str | None) -> Optional[Tuple[int, int]]:
    """
    Parse a period label into (start, end).

    '第1-2节' -> (1, 2); '第一大节\\n第1-2节' -> (1, 2); '第3节' -> (3, 3).
    The range is returned as written, not reordered. Numbers <= 0 are
    incidental digits, not periods.
    """
    if not text:
        return None
    m = _SECTION_RANGE_RE.search(text)
    if m:
        start, end = int(m.group(1)), int(m.group(2))
        if start > 0 and end > 0:
            return start, end

    for m in _NUMBER_RE.finditer(text):
        section = int(m.group(0))
        if section > 0:
            return section, section
    return None


# ──────────────────────────────────────────────────────────────────
#  Dates
# ──────────────────────────────────────────────────────────────────

def normalize_date(raw: Any) -> str | None:
    """
    Normalize '2024/09/01', '2024-9-1' or '2024-09-01 00:00:00' to
    'YYYY-MM-DD'. Integer values are epoch milliseconds (UTC).
    Returns None for anything unparseable.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            logger.warning("Could not convert timestamp %r to a date", raw)
            return None

    text = str(raw).strip()
    if not text:
        return None
    text = text.replace("/", "-")
    # Drop a time-of-day suffix: "2024-09-01 00:00:00", "2024-09-01T00:00:00Z"
    date_part = re.split(r"[T\s]", text, maxsplit=1)[0]
    try:
        return datetime.strptime(date_part, "%Y-%m-%d").date().isoformat()
    except ValueError:
        logger.warning("Could not convert raw date value %r to a valid date", raw)
        return None
