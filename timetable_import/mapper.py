"""
Canonical mapper: adapter fragments -> Course / TimeSlot / ScheduleConfig.

Every absent field goes through one default table instead of per-adapter
fallbacks. A value is absent when it is missing, None, a blank string, or
(for numeric fields) not an integer.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from .fields import parse_sections
from .models import Course, ScheduleConfig, SourceFragments, TimeSlot

logger = logging.getLogger(__name__)

FIELD_DEFAULTS: Dict[str, Any] = {
    "name": "",
    "teacher": "",
    "position": "",
    "startTime": "",
    "endTime": "",
    "day": 0,
    "startSection": 0,
    "endSection": 0,
    "weeks": [],
}

_TEXT_FIELDS = {"name", "teacher", "position", "startTime", "endTime"}
_INT_FIELDS = {"day", "startSection", "endSection"}

# Composite teachers ("teacherComposite" set by the adapter):
# "Zhang San-Professor" -> "Zhang San". Other teachers are kept whole.
TEACHER_SEPARATOR = "-"
DEFAULT_TOTAL_WEEKS = 20


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        return None


def _field(fragment: Dict, key: str) -> Any:
    """Read one field, substituting its neutral default when absent."""
    value = fragment.get(key)
    default = FIELD_DEFAULTS[key]

    if key in _TEXT_FIELDS:
        if value is not None and str(value).strip():
            return str(value).strip()
    elif key in _INT_FIELDS:
        number = _as_int(value)
        if number is not None:
            return number
    elif key == "weeks":
        if isinstance(value, (list, tuple, set)) and value:
            weeks = {n for n in (_as_int(w) for w in value) if n is not None and n > 0}
            if weeks:
                return sorted(weeks)

    logger.warning("Field %r absent or invalid (%r), using %r", key, value, default)
    return list(default) if isinstance(default, list) else default


def _truncate_teacher(teacher: str, composite: bool) -> str:
    if composite and TEACHER_SEPARATOR in teacher:
        return teacher.split(TEACHER_SEPARATOR, 1)[0].strip()
    return teacher


def _section_range(fragment: Dict) -> Tuple[int, int]:
    """
    Fragments carry either 'startSection'/'endSection' or a single
    'sections' value ('3', '3-4' or 3). A single value fills both ends.
    """
    if "sections" in fragment and "startSection" not in fragment:
        raw = fragment.get("sections")
        parsed = parse_sections(str(raw)) if raw is not None else None
        if parsed is None:
            logger.warning("Period value %r is unusable, using 0", raw)
            return 0, 0
        return parsed

    start = _field(fragment, "startSection")
    if fragment.get("endSection") is None:
        return start, start
    return start, _field(fragment, "endSection")


def course_from_fragment(fragment: Dict) -> Course:
    start, end = _section_range(fragment)
    return Course(
        name=_field(fragment, "name"),
        teacher=_truncate_teacher(
            _field(fragment, "teacher"), bool(fragment.get("teacherComposite"))
        ),
        position=_field(fragment, "position"),
        day=_field(fragment, "day"),
        start_section=start,
        end_section=end,
        weeks=_field(fragment, "weeks"),
    )


def time_slot_from_fragment(fragment: Dict, index: int) -> TimeSlot:
    """``index`` is the 0-based list position, used when 'number' is absent."""
    number = _as_int(fragment.get("number"))
    if number is None or number <= 0:
        number = index + 1
    return TimeSlot(
        number=number,
        start_time=_field(fragment, "startTime"),
        end_time=_field(fragment, "endTime"),
    )


def config_from_fragment(fragment: Dict) -> ScheduleConfig:
    total_weeks = _as_int(fragment.get("totalWeeks"))
    if total_weeks is None or total_weeks <= 0:
        logger.warning(
            "Total week count %r unusable, using %d", fragment.get("totalWeeks"), DEFAULT_TOTAL_WEEKS
        )
        total_weeks = DEFAULT_TOTAL_WEEKS
    return ScheduleConfig(
        semester_start_date=fragment.get("semesterStartDate") or None,
        total_weeks=total_weeks,
        first_day_of_week=1,
        default_class_duration=_as_int(fragment.get("defaultClassDuration")),
        default_break_duration=_as_int(fragment.get("defaultBreakDuration")),
    )


def map_fragments(
    fragments: SourceFragments,
) -> Tuple[ScheduleConfig, List[Course], List[TimeSlot]]:
    """Map one adapter's output to canonical records."""
    courses = [course_from_fragment(f) for f in fragments.courses]
    time_slots = [time_slot_from_fragment(f, i) for i, f in enumerate(fragments.time_slots)]
    config = config_from_fragment(fragments.config)
    return config, courses, time_slots
