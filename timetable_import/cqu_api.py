"""
Map the Chongqing University (my.cqu.edu.cn) REST API payload into fragments.

The payload is the four values fetched by ``cqu_fetch.fetch_payload``:

    {
      "start_date": "2024-09-02 00:00:00",   # session beginDate
      "max_week": 20,
      "time_slots": [{"periodOrder": 1, "startTime": "08:30", "endTime": "09:15"}, ...],
      "schedule": [{"courseName": ..., "instructorName": "Li-Prof", "position": ...,
                    "roomName": ..., "weekDay": 1, "periodFormat": "1-2",
                    "teachingWeek": "0111100..."}, ...],
    }

Mapping is field renaming; the only text parsing is the teaching-week bitmask.
``roomName`` is used only when ``position`` is null; an empty ``position``
is kept and defaulted by the mapper like any blank field.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from .fields import normalize_date, parse_week_bitmask
from .models import SourceFragments

logger = logging.getLogger(__name__)


def _course_fragment(entry: Dict[str, Any]) -> Dict[str, Any] | None:
    weeks = parse_week_bitmask(entry.get("teachingWeek"))
    if not weeks:
        logger.warning(
            "Dropping %r: teaching week mask %r has no weeks",
            entry.get("courseName"),
            entry.get("teachingWeek"),
        )
        return None
    position = entry.get("position")
    return {
        "name": entry.get("courseName"),
        "teacher": entry.get("instructorName"),
        # instructorName is "name-title"
        "teacherComposite": True,
        "position": position if position is not None else entry.get("roomName"),
        "day": entry.get("weekDay"),
        "sections": entry.get("periodFormat"),
        "weeks": weeks,
    }


def parse_payload(payload: Dict[str, Any]) -> SourceFragments:
    courses: List[Dict[str, Any]] = []
    for entry in payload.get("schedule") or []:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed timetable entry: %r", entry)
            continue
        fragment = _course_fragment(entry)
        if fragment is not None:
            courses.append(fragment)

    time_slots: List[Dict[str, Any]] = []
    for slot in payload.get("time_slots") or []:
        if not isinstance(slot, dict):
            logger.warning("Skipping malformed class period: %r", slot)
            continue
        time_slots.append({
            "number": slot.get("periodOrder"),
            "startTime": slot.get("startTime"),
            "endTime": slot.get("endTime"),
        })

    config = {
        "semesterStartDate": normalize_date(payload.get("start_date")),
        "totalWeeks": payload.get("max_week"),
    }
    return SourceFragments(courses=courses, time_slots=time_slots, config=config)
