"""Tests for wakeup_share.py – share blob parsing."""
import json

import pytest

from timetable_import.errors import StructuralError
from timetable_import.pipeline import build_schedule
from timetable_import.wakeup_share import parse_payload, split_parts


def _blob(base=None, slots=None, ui=None, catalog=None, details=None):
    parts = [
        base if base is not None else {"courseLen": 45, "theBreakLen": 10},
        slots if slots is not None else [
            {"node": 1, "startTime": "08:00", "endTime": "08:45"},
            {"node": 2, "startTime": "08:55", "endTime": "09:40"},
        ],
        ui if ui is not None else {"nodes": [1, 2], "startDate": "2024/9/2", "maxWeek": 18},
        catalog if catalog is not None else [{"id": 7, "courseName": "Math"}],
        details if details is not None else [{
            "id": 7, "startWeek": 1, "endWeek": 4, "type": 0,
            "startNode": 1, "step": 2, "day": 2, "teacher": "Li", "room": "A101",
        }],
    ]
    return "\n".join(json.dumps(p, ensure_ascii=False) for p in parts)


class TestSplitParts:
    def test_too_few_parts(self):
        with pytest.raises(StructuralError, match="expected at least 5"):
            split_parts('{}\n[]\n{}\n[]')

    def test_empty(self):
        with pytest.raises(StructuralError):
            split_parts("")

    def test_bad_json(self):
        with pytest.raises(StructuralError, match="time slots"):
            split_parts('{}\n[oops\n{}\n[]\n[]')

    def test_blank_lines_ignored(self):
        assert len(split_parts('{}\n\n[]\n{}\n[]\n[]\n')) == 5

    def test_structural_error_is_value_error(self):
        with pytest.raises(ValueError):
            split_parts("{}")


class TestParsePayload:
    def test_course_fragment(self):
        fragments = parse_payload(_blob())
        assert fragments.courses == [{
            "name": "Math",
            "teacher": "Li",
            "position": "A101",
            "day": 2,
            "startSection": 1,
            "endSection": 2,
            "weeks": [1, 2, 3, 4],
        }]

    def test_config(self):
        config = parse_payload(_blob()).config
        assert config == {
            "semesterStartDate": "2024-09-02",
            "totalWeeks": 18,
            "defaultClassDuration": 45,
            "defaultBreakDuration": 10,
        }

    def test_odd_and_even_weeks(self):
        details = [
            {"id": 7, "startWeek": 1, "endWeek": 8, "type": 1, "startNode": 1, "step": 1, "day": 1},
            {"id": 7, "startWeek": 1, "endWeek": 8, "type": 2, "startNode": 3, "step": 1, "day": 1},
        ]
        courses = parse_payload(_blob(details=details)).courses
        assert courses[0]["weeks"] == [1, 3, 5, 7]
        assert courses[1]["weeks"] == [2, 4, 6, 8]

    def test_unmatched_id_dropped(self):
        details = [{"id": 99, "startWeek": 1, "endWeek": 2, "type": 0, "startNode": 1, "step": 1, "day": 1}]
        assert parse_payload(_blob(details=details)).courses == []

    def test_empty_week_range_dropped(self, caplog):
        details = [{"id": 7, "startWeek": 1, "endWeek": 1, "type": 2, "startNode": 1, "step": 1, "day": 1}]
        assert parse_payload(_blob(details=details)).courses == []
        assert "Math" in caplog.text

    @pytest.mark.parametrize(
        "start_node,step",
        [(3, None), (3, 0), (3, -1), (0, 2), (None, 1), ("x", 1)],
    )
    def test_bad_start_node_or_step_dropped(self, caplog, start_node, step):
        details = [{"id": 7, "startWeek": 1, "endWeek": 2, "type": 0, "startNode": start_node,
                    "step": step, "day": 1}]
        assert parse_payload(_blob(details=details)).courses == []
        assert "bad startNode/step" in caplog.text

    def test_time_slots_filtered_by_node_list(self):
        slots = [
            {"node": 1, "startTime": "08:00", "endTime": "08:45"},
            {"node": 2, "startTime": "00:00", "endTime": "00:00"},
            {"node": 3, "startTime": "10:00", "endTime": "10:45"},
        ]
        fragments = parse_payload(_blob(slots=slots, ui={"nodes": [1, 2]}))
        assert fragments.time_slots == [{"number": 1, "startTime": "08:00", "endTime": "08:45"}]

    def test_node_count(self):
        slots = [
            {"node": 1, "startTime": "08:00", "endTime": "08:45"},
            {"node": 2, "startTime": "08:55", "endTime": "09:40"},
            {"node": 3, "startTime": "10:00", "endTime": "10:45"},
        ]
        fragments = parse_payload(_blob(slots=slots, ui={"nodes": 2}))
        assert [s["number"] for s in fragments.time_slots] == [1, 2]

    def test_missing_node_setting(self):
        assert parse_payload(_blob(ui={"maxWeek": 20})).time_slots == []

    def test_bad_start_date(self):
        assert parse_payload(_blob(ui={"nodes": [1], "startDate": "soon"})).config["semesterStartDate"] is None


def test_build_schedule_end_to_end():
    result = build_schedule("wakeup", _blob())
    assert [c.to_dict() for c in result.courses] == [{
        "name": "Math",
        "teacher": "Li",
        "position": "A101",
        "day": 2,
        "startSection": 1,
        "endSection": 2,
        "weeks": [1, 2, 3, 4],
    }]
    assert result.config.to_dict()["semesterTotalWeeks"] == 18
    assert len(result.time_slots) == 2


def test_single_period_records_merge():
    details = [
        {"id": 7, "startWeek": 1, "endWeek": 4, "type": 0, "startNode": 2, "step": 1, "day": 2,
         "teacher": "Li", "room": "A101"},
        {"id": 7, "startWeek": 1, "endWeek": 4, "type": 0, "startNode": 1, "step": 1, "day": 2,
         "teacher": "Li", "room": "A101"},
    ]
    result = build_schedule("wakeup", _blob(details=details))
    assert [(c.start_section, c.end_section) for c in result.courses] == [(1, 2)]
    assert result.merged_count == 1


def test_hyphenated_teacher_kept():
    details = [{"id": 7, "startWeek": 1, "endWeek": 2, "type": 0, "startNode": 1, "step": 2, "day": 3,
                "teacher": "Jean-Luc Picard", "room": "Bridge"}]
    result = build_schedule("wakeup", _blob(details=details))
    assert result.courses[0].teacher == "Jean-Luc Picard"
    assert (result.courses[0].start_section, result.courses[0].end_section) == (1, 2)
