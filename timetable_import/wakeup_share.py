"""
Parse a WakeUp timetable share blob into fragments.

The share API returns several JSON documents joined by line breaks:

    0  base config      {"courseLen": 45, "theBreakLen": 10, ...}
    1  time slots       [{"node": 1, "startTime": "08:00", "endTime": "08:45"}, ...]
    2  UI config        {"nodes": 12, "startDate": "2024/9/2", "maxWeek": 20, ...}
    3  course catalog   [{"id": 7, "courseName": "Math"}, ...]
    4  section detail   [{"id": 7, "startWeek": 1, "endWeek": 16, "type": 0,
                          "startNode": 1, "step": 2, "day": 2,
                          "teacher": "Li", "room": "A101"}, ...]

Detail entries are joined to the catalog by ``id``. Catalog and schedule may
be out of sync at the source, so an unmatched id is dropped, not reported.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from .errors import StructuralError
from .fields import expand_week_range, normalize_date
from .models import SourceFragments

logger = logging.getLogger(__name__)

MIN_PARTS = 5
_PART_NAMES = ("base config", "time slots", "UI config", "course catalog", "section detail")


def split_parts(raw_data: str) -> List[Any]:
    """Split the blob on line breaks and decode each part independently."""
    parts = [p for p in (raw_data or "").strip().splitlines() if p.strip()]
    if len(parts) < MIN_PARTS:
        raise StructuralError(
            f"Incomplete share data: expected at least {MIN_PARTS} parts, got {len(parts)}."
        )
    decoded: List[Any] = []
    for i, part in enumerate(parts):
        try:
            decoded.append(json.loads(part))
        except json.JSONDecodeError as e:
            name = _PART_NAMES[i] if i < len(_PART_NAMES) else f"part {i}"
            if i < MIN_PARTS:
                raise StructuralError(f"Share data {name} is not valid JSON: {e}") from e
            logger.warning("Ignoring undecodable trailing part %d: %s", i, e)
            decoded.append(None)
    return decoded


def _valid_nodes(ui_config: Dict[str, Any]) -> set:
    nodes = ui_config.get("nodes")
    if isinstance(nodes, list):
        return {n for n in nodes if isinstance(n, int)}
    if isinstance(nodes, int) and not isinstance(nodes, bool) and nodes > 0:
        logger.warning("uiConfig.nodes is a count (%d), using periods 1..%d", nodes, nodes)
        return set(range(1, nodes + 1))
    logger.warning("uiConfig.nodes is unusable (%r), no time slots will be kept", nodes)
    return set()


def _time_slot_fragments(slots: Any, valid_nodes: set) -> List[Dict[str, Any]]:
    fragments: List[Dict[str, Any]] = []
    for slot in slots if isinstance(slots, list) else []:
        if not isinstance(slot, dict):
            logger.warning("Skipping malformed time slot: %r", slot)
            continue
        if slot.get("startTime") == "00:00" or slot.get("endTime") == "00:00":
            continue
        node = slot.get("node")
        if not isinstance(node, int) or node not in valid_nodes:
            continue
        fragments.append({
            "number": node,
            "startTime": slot.get("startTime"),
            "endTime": slot.get("endTime"),
        })
    return fragments


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _course_fragments(catalog: Any, details: Any) -> List[Dict[str, Any]]:
    by_id: Dict[Any, Dict[str, Any]] = {}
    for course in catalog if isinstance(catalog, list) else []:
        if isinstance(course, dict) and course.get("id") is not None:
            by_id[course["id"]] = course

    fragments: List[Dict[str, Any]] = []
    for detail in details if isinstance(details, list) else []:
        if not isinstance(detail, dict):
            logger.warning("Skipping malformed section detail: %r", detail)
            continue
        course_id = detail.get("id")
        info = by_id.get(course_id) if course_id is not None else None
        if info is None:
            logger.debug("No catalog entry for section id %r, dropped", course_id)
            continue

        weeks = expand_week_range(detail.get("startWeek"), detail.get("endWeek"), detail.get("type"))
        if not weeks:
            logger.warning(
                "Dropping %r: no weeks in %r-%r type %r",
                info.get("courseName"),
                detail.get("startWeek"),
                detail.get("endWeek"),
                detail.get("type"),
            )
            continue

        start_node = _positive_int(detail.get("startNode"))
        step = _positive_int(detail.get("step"))
        if start_node is None or step is None:
            logger.warning(
                "Dropping %r: bad startNode/step %r/%r",
                info.get("courseName"),
                detail.get("startNode"),
                detail.get("step"),
            )
            continue

        fragments.append({
            "name": info.get("courseName"),
            "teacher": detail.get("teacher"),
            "position": detail.get("room"),
            "day": detail.get("day"),
            "startSection": start_node,
            "endSection": start_node + step - 1,
            "weeks": weeks,
        })
    return fragments


def parse_payload(raw_data: str) -> SourceFragments:
    parts = split_parts(raw_data)
    base_config, slots_raw, ui_config, catalog, details = parts[:MIN_PARTS]
    if not isinstance(base_config, dict):
        base_config = {}
    if not isinstance(ui_config, dict):
        logger.warning("UI config part is not an object: %r", ui_config)
        ui_config = {}

    config = {
        "semesterStartDate": normalize_date(ui_config.get("startDate")),
        "totalWeeks": ui_config.get("maxWeek"),
        "defaultClassDuration": base_config.get("courseLen"),
        "defaultBreakDuration": base_config.get("theBreakLen"),
    }
    return SourceFragments(
        courses=_course_fragments(catalog, details),
        time_slots=_time_slot_fragments(slots_raw, _valid_nodes(ui_config)),
        config=config,
    )
