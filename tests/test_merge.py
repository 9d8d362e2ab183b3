"""Tests for merge.py – consecutive period merging."""
from dataclasses import replace

import pytest

from timetable_import.merge import can_merge, merge_courses
from timetable_import.models import Course


def _course(start, end=None, **overrides):
    base = Course(
        name="X",
        teacher="T",
        position="P",
        day=1,
        start_section=start,
        end_section=start if end is None else end,
        weeks=[1, 2],
    )
    return replace(base, **overrides)


class TestMergeCourses:
    def test_adjacent_records_merge(self):
        merged = merge_courses([_course(3), _course(4)])
        assert len(merged) == 1
        assert merged[0].start_section == 3
        assert merged[0].end_section == 4

    def test_input_order_does_not_matter(self):
        merged = merge_courses([_course(5), _course(3), _course(4)])
        assert [(c.start_section, c.end_section) for c in merged] == [(3, 5)]

    @pytest.mark.parametrize(
        "field,value",
        [("teacher", "U"), ("position", "Q"), ("weeks", [1, 2, 3]), ("name", "Y"), ("day", 2)],
    )
    def test_any_difference_prevents_merge(self, field, value):
        merged = merge_courses([_course(3), _course(4, **{field: value})])
        assert len(merged) == 2

    def test_same_week_count_is_not_enough(self):
        merged = merge_courses([_course(3, weeks=[1, 2]), _course(4, weeks=[3, 4])])
        assert len(merged) == 2

    def test_gap_prevents_merge(self):
        merged = merge_courses([_course(3), _course(5)])
        assert [(c.start_section, c.end_section) for c in merged] == [(3, 3), (5, 5)]

    def test_overlap_prevents_merge(self):
        merged = merge_courses([_course(3, 4), _course(4, 5)])
        assert len(merged) == 2

    def test_multi_period_blocks_chain(self):
        merged = merge_courses([_course(1, 2), _course(3, 4), _course(5, 6)])
        assert [(c.start_section, c.end_section) for c in merged] == [(1, 6)]

    def test_sorted_by_day_weeks_then_start(self):
        records = [
            _course(1, day=3),
            _course(7, day=1, name="B"),
            _course(1, day=1, weeks=[10]),
            _course(1, day=1, name="C"),
        ]
        merged = merge_courses(records)
        # "[1,2]" sorts before "[10]" as text
        assert [(c.day, c.weeks, c.start_section) for c in merged] == [
            (1, [1, 2], 1),
            (1, [1, 2], 7),
            (1, [10], 1),
            (3, [1, 2], 1),
        ]

    def test_input_not_mutated(self):
        first, second = _course(3), _course(4)
        merge_courses([first, second])
        assert first.end_section == 3
        assert second.start_section == 4

    def test_empty(self):
        assert merge_courses([]) == []

    def test_idempotent(self):
        records = [
            _course(1),
            _course(2),
            _course(4),
            _course(5, teacher="U"),
            _course(6, teacher="U"),
            _course(1, day=2, weeks=[3]),
            _course(2, day=2, weeks=[3]),
            _course(3, day=2, weeks=[4]),
        ]
        once = merge_courses(records)
        assert merge_courses(once) == once


class TestCanMerge:
    def test_strict_adjacency(self):
        assert can_merge(_course(3), _course(4)) is True
        assert can_merge(_course(3), _course(3)) is False
        assert can_merge(_course(3), _course(5)) is False
