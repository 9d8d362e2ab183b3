"""
Canonical records handed to the persistence gateway.

Attributes are snake_case; ``to_dict()`` gives the camelCase shape the host
app stores. Records are created fresh per import run and never shared.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class TimeSlot:
    """One numbered class period of the daily schedule."""

    number: int
    start_time: str
    end_time: str

    def to_dict(self) -> Dict:
        return {
            "number": self.number,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass
class Course:
    """
    One contiguous occupation of periods [start_section, end_section] on a
    weekday (Monday=1), recurring in exactly the listed weeks.
    """

    name: str
    teacher: str
    position: str
    day: int
    start_section: int
    end_section: int
    weeks: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "teacher": self.teacher,
            "position": self.position,
            "day": self.day,
            "startSection": self.start_section,
            "endSection": self.end_section,
            "weeks": list(self.weeks),
        }


@dataclass
class ScheduleConfig:
    semester_start_date: Optional[str]
    total_weeks: int
    first_day_of_week: int = 1
    default_class_duration: Optional[int] = None
    default_break_duration: Optional[int] = None

    def to_dict(self) -> Dict:
        # The host app reads the week count as "semesterTotalWeeks".
        data: Dict = {
            "semesterStartDate": self.semester_start_date,
            "semesterTotalWeeks": self.total_weeks,
            "firstDayOfWeek": self.first_day_of_week,
        }
        if self.default_class_duration is not None:
            data["defaultClassDuration"] = self.default_class_duration
        if self.default_break_duration is not None:
            data["defaultBreakDuration"] = self.default_break_duration
        return data


@dataclass
class SourceFragments:
    """
    What a source adapter produces: loosely-typed dicts keyed by canonical
    field names but not yet defaulted or validated. Discarded once mapped.
    """

    courses: List[Dict] = field(default_factory=list)
    time_slots: List[Dict] = field(default_factory=list)
    config: Dict = field(default_factory=dict)
