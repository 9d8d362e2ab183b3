"""
Block merge: join course records that are one class split across
consecutive periods.

Two records merge only when day, the exact week sequence, name, teacher and
position are all equal and the next record starts right after the current
block ends (no gap, no overlap).
"""
from __future__ import annotations

import json
from dataclasses import replace
from typing import Iterable, List

from .models import Course


def _weeks_key(weeks: List[int]) -> str:
    # Same rendering as a compact JSON array, compared as text.
    return json.dumps(list(weeks), separators=(",", ":"))


def _sort_key(course: Course) -> tuple:
    return (course.day, _weeks_key(course.weeks), course.start_section)


def can_merge(current: Course, nxt: Course) -> bool:
    return (
        nxt.day == current.day
        and list(nxt.weeks) == list(current.weeks)
        and nxt.name == current.name
        and nxt.teacher == current.teacher
        and nxt.position == current.position
        and nxt.start_section == current.end_section + 1
    )


def merge_courses(courses: Iterable[Course]) -> List[Course]:
    """
    Return the merged sequence, ordered by (day, weeks, start section).
    The input records are left untouched. Running it again on its own
    output changes nothing.
    """
    ordered = sorted(courses, key=_sort_key)
    if not ordered:
        return []

    merged: List[Course] = []
    current = replace(ordered[0], weeks=list(ordered[0].weeks))
    for nxt in ordered[1:]:
        if can_merge(current, nxt):
            current.end_section = nxt.end_section
        else:
            merged.append(current)
            current = replace(nxt, weeks=list(nxt.weeks))
    merged.append(current)
    return merged
