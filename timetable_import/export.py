"""
Export an imported schedule to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List

import icalendar
import pytz

from .models import Course, ScheduleConfig, TimeSlot

logger = logging.getLogger(__name__)

# China Standard Time for calendar
TZ_CN = "Asia/Shanghai"


def _parse_time(date_str: str, time_str: str) -> datetime:
    """Parse a YYYY-MM-DD date and an HH:MM (or HH:MM:SS) time."""
    if not date_str or not time_str:
        raise ValueError("Missing date or time")
    if len(time_str) == 5 and ":" in time_str:
        time_str = time_str + ":00"
    return datetime.strptime(f"{date_str.strip()} {time_str.strip()}", "%Y-%m-%d %H:%M:%S")


def course_dates(course: Course, semester_start: date) -> List[date]:
    """Concrete dates of a course. Week 1 is the week containing the start date."""
    if not 1 <= course.day <= 7:
        return []
    monday = semester_start - timedelta(days=semester_start.weekday())
    return [monday + timedelta(weeks=week - 1, days=course.day - 1) for week in course.weeks]


def export_ics(
    config: ScheduleConfig,
    courses: List[Course],
    time_slots: List[TimeSlot],
    out_path: str | Path,
    tz_name: str = TZ_CN,
) -> int:
    """Export one event per course meeting. Returns the number of events."""
    if not config.semester_start_date:
        raise ValueError("ICS export needs a semester start date; this source does not provide one.")
    semester_start = date.fromisoformat(config.semester_start_date)
    slots: Dict[int, TimeSlot] = {s.number: s for s in time_slots}
    tz = pytz.timezone(tz_name)

    cal = icalendar.Calendar()
    cal.add("prodid", "-//Timetable Import//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Timetable")
    cal.add("x-wr-timezone", tz_name)

    count = 0
    for c in courses:
        first = slots.get(c.start_section)
        last = slots.get(c.end_section)
        if first is None or last is None:
            logger.warning(
                "No time slot for periods %d-%d of %r, not exported", c.start_section, c.end_section, c.name
            )
            continue
        for day in course_dates(c, semester_start):
            try:
                start = _parse_time(day.isoformat(), first.start_time)
                end = _parse_time(day.isoformat(), last.end_time)
            except ValueError:
                logger.warning("Bad slot times for %r on %s, not exported", c.name, day)
                continue

            event = icalendar.Event()
            uid_string = f"{c.name}-{day.isoformat()}-{c.start_section}-{c.position}"
            uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
            event.add("uid", f"{uid_hash}@timetable-import")
            event.add("summary", c.name)
            event.add("description", f"Teacher: {c.teacher}\nPeriods: {c.start_section}-{c.end_section}")
            event.add("location", c.position)
            event.add("dtstart", tz.localize(start))
            event.add("dtend", tz.localize(end))
            event.add("dtstamp", datetime.now(timezone.utc))
            cal.add_component(event)
            count += 1

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")
    return count


def export_csv(courses: List[Course], out_path: str | Path) -> None:
    """Export courses to CSV, weeks as a comma-separated cell."""
    keys = ["name", "teacher", "position", "day", "startSection", "endSection", "weeks"]
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=keys, extrasaction="ignore")
        w.writeheader()
        for c in courses:
            row = c.to_dict()
            row["weeks"] = ",".join(str(week) for week in c.weeks)
            w.writerow(row)


def export_json(
    config: ScheduleConfig,
    courses: List[Course],
    time_slots: List[TimeSlot],
    out_path: str | Path,
) -> None:
    """Export the whole schedule as one JSON document."""
    payload = {
        "config": config.to_dict(),
        "courses": [c.to_dict() for c in courses],
        "timeSlots": [s.to_dict() for s in time_slots],
    }
    Path(out_path).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def export(
    config: ScheduleConfig,
    courses: List[Course],
    time_slots: List[TimeSlot],
    out_path: str | Path,
    fmt: str,
    tz_name: str = TZ_CN,
) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(config, courses, time_slots, out_path, tz_name)
    elif fmt == "csv":
        export_csv(courses, out_path)
    elif fmt == "json":
        export_json(config, courses, time_slots, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
