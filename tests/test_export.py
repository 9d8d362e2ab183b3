import csv
import json
from datetime import date

import pytest

from timetable_import.export import course_dates, export, export_csv, export_ics, export_json
from timetable_import.models import Course, ScheduleConfig, TimeSlot

CONFIG = ScheduleConfig("2024-09-02", 18)
SLOTS = [TimeSlot(1, "08:00", "08:45"), TimeSlot(2, "08:55", "09:40")]


def _math(**kw):
    base = dict(name="Math", teacher="Li", position="A101", day=2, start_section=1, end_section=2, weeks=[1, 3])
    base.update(kw)
    return Course(**base)


def test_export_ics(tmp_path):
    out_path = tmp_path / "test.ics"

    count = export_ics(CONFIG, [_math()], SLOTS, out_path)

    assert count == 2
    content = out_path.read_text(encoding="utf-8")

    # Verify standard ICS elements
    assert "BEGIN:VCALENDAR" in content
    assert content.count("BEGIN:VEVENT") == 2
    assert "END:VCALENDAR" in content

    # Tuesday of weeks 1 and 3, first slot start to last slot end
    assert "DTSTART;TZID=Asia/Shanghai:20240903T080000" in content
    assert "DTEND;TZID=Asia/Shanghai:20240903T094000" in content
    assert "DTSTART;TZID=Asia/Shanghai:20240917T080000" in content

    assert "UID:" in content
    assert "@timetable-import" in content
    assert "LOCATION:A101" in content


def test_export_ics_other_timezone(tmp_path):
    out_path = tmp_path / "test.ics"
    export_ics(CONFIG, [_math(weeks=[1])], SLOTS, out_path, tz_name="Asia/Hong_Kong")
    assert "DTSTART;TZID=Asia/Hong_Kong:20240903T080000" in out_path.read_text(encoding="utf-8")


def test_export_ics_skips_course_without_slots(tmp_path):
    count = export_ics(CONFIG, [_math(start_section=9, end_section=10)], SLOTS, tmp_path / "x.ics")
    assert count == 0


def test_export_ics_needs_start_date(tmp_path):
    with pytest.raises(ValueError, match="start date"):
        export_ics(ScheduleConfig(None, 20), [_math()], SLOTS, tmp_path / "x.ics")


def test_course_dates_mid_week_start():
    # week 1 is the week containing the start date
    assert course_dates(_math(day=1, weeks=[1, 2]), date(2024, 9, 4)) == [date(2024, 9, 2), date(2024, 9, 9)]


def test_course_dates_invalid_day():
    assert course_dates(_math(day=0), date(2024, 9, 2)) == []


def test_export_csv(tmp_path):
    out_path = tmp_path / "t.csv"
    export_csv([_math()], out_path)
    with open(out_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows == [{
        "name": "Math", "teacher": "Li", "position": "A101", "day": "2",
        "startSection": "1", "endSection": "2", "weeks": "1,3",
    }]


def test_export_json(tmp_path):
    out_path = tmp_path / "t.json"
    export_json(CONFIG, [_math()], SLOTS, out_path)
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data["config"]["semesterTotalWeeks"] == 18
    assert data["courses"][0]["weeks"] == [1, 3]
    assert len(data["timeSlots"]) == 2


def test_export_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="Unsupported format"):
        export(CONFIG, [], SLOTS, tmp_path / "x", "xml")
