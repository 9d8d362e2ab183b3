"""
Parse the HNVCC (jwxt.hnvcc.edu.cn) rendered timetable page into fragments.

The real HTML structure:
- <table id="timetable"> with a <tbody> of rows. The first cell of a row is
  the period label ("第一大节\\n第1-2节"), the next seven are Monday..Sunday.
- A weekday cell holds zero or more <div class="item-box"> blocks. Inside a
  block, each class meeting is a run of siblings:
    <p>Course name</p>
    <div class="tch-name"><span>教师：Li</span><span>学分：2</span></div>
    <div><img src=".../item1.png"><span>A101</span><span>第1-16周</span></div>
- Remark rows span all weekday columns with td[colspan="7"].
- <li id="li_showWeek"> shows the current week as "第3周/20周".

Location and weeks are found only through the item1.png icon. If the page
changes that filename the meeting is skipped, not guessed.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag  # type: ignore[import]

from .errors import StructuralError
from .fields import parse_sections, parse_weeks
from .models import SourceFragments

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_WEEKS = 20
LOCATION_ICON_SELECTOR = 'img[src*="item1.png"]'
TEACHER_PREFIX = "教师："


# ──────────────────────────────────────────────────────────────────
#  Seasonal time-slot presets
# ──────────────────────────────────────────────────────────────────

_SHARED_MORNING = [
    ("08:20", "09:05"),
    ("09:15", "10:00"),
    ("10:20", "11:05"),
    ("11:15", "12:00"),
]
_SHARED_EVENING = [
    ("19:00", "19:45"),
    ("19:55", "20:40"),
    ("20:45", "21:30"),
    ("21:35", "22:20"),
]

SEASON_PRESETS: Dict[str, List[tuple[str, str]]] = {
    "summer": _SHARED_MORNING + [
        ("14:00", "14:45"),
        ("14:55", "15:40"),
        ("15:55", "16:40"),
        ("16:50", "17:35"),
    ] + _SHARED_EVENING,
    "winter": _SHARED_MORNING + [
        ("14:30", "15:15"),
        ("15:25", "16:10"),
        ("16:25", "17:10"),
        ("17:20", "18:05"),
    ] + _SHARED_EVENING,
}


def preset_time_slots(season: str) -> List[Dict]:
    """Time slot fragments for 'summer' or 'winter'."""
    try:
        periods = SEASON_PRESETS[season]
    except KeyError:
        raise ValueError(f"Unknown season preset: {season!r}. Use summer or winter.") from None
    return [
        {"number": i, "startTime": start, "endTime": end}
        for i, (start, end) in enumerate(periods, start=1)
    ]


# ──────────────────────────────────────────────────────────────────
#  Sibling search
# ──────────────────────────────────────────────────────────────────

def _find_following(
    start: Tag,
    match: Callable[[Tag], bool],
    stop: Optional[Callable[[Tag], bool]] = None,
) -> Tag | None:
    """
    Walk the element siblings after ``start`` in document order. Return the
    first one satisfying ``match``; give up at the first ``stop`` element.
    """
    for sibling in start.find_next_siblings():
        if match(sibling):
            return sibling
        if stop is not None and stop(sibling):
            return None
    return None


def _is_teacher_info(el: Tag) -> bool:
    return "tch-name" in (el.get("class") or [])


def _is_location_info(el: Tag) -> bool:
    return el.name == "div" and el.select_one(LOCATION_ICON_SELECTOR) is not None


def _is_course_name(el: Tag) -> bool:
    return el.name == "p"


# ──────────────────────────────────────────────────────────────────
#  Page parsing
# ──────────────────────────────────────────────────────────────────

def parse_total_weeks(soup: BeautifulSoup) -> int:
    """Scrape '/20周' from #li_showWeek; 20 when absent."""
    el = soup.find(id="li_showWeek")
    m = re.search(r"/(\d+)周", el.decode_contents() if el else "")
    return int(m.group(1)) if m else DEFAULT_TOTAL_WEEKS


def _parse_meeting(name_p: Tag, day: int, sections: tuple[int, int]) -> Dict | None:
    name = name_p.get_text(strip=True)
    if not name:
        return None

    tch_div = _find_following(name_p, _is_teacher_info)
    if tch_div is None:
        logger.warning("No teacher element after %r, skipped", name)
        return None
    teacher_span = tch_div.select_one("span:nth-child(1)")
    teacher = teacher_span.get_text(strip=True).replace(TEACHER_PREFIX, "").strip() if teacher_span else ""

    info_div = _find_following(tch_div, _is_location_info, stop=_is_course_name)
    if info_div is None:
        logger.warning("No location/week element for %r, skipped", name)
        return None

    spans = info_div.find_all("span")
    position = spans[0].get_text(strip=True) if len(spans) >= 1 else ""
    week_text = spans[1].get_text(strip=True) if len(spans) >= 2 else ""

    weeks = parse_weeks(week_text)
    if not weeks:
        logger.warning("No weeks in %r for %r, skipped", week_text, name)
        return None

    return {
        "name": name,
        "teacher": teacher,
        "position": position,
        "day": day,
        "startSection": sections[0],
        "endSection": sections[1],
        "weeks": weeks,
    }


def _parse_row(row: Tag) -> List[Dict]:
    cells = row.find_all("td", recursive=False)
    if len(cells) < 2 or row.select_one('td[colspan="7"]'):
        return []

    label = cells[0].get_text("\n", strip=True)
    sections = parse_sections(label)
    if sections is None:
        logger.debug("Row label %r has no period number, skipped", label)
        return []

    meetings: List[Dict] = []
    for day in range(1, 8):
        if day >= len(cells):
            break
        for box in cells[day].select(".item-box"):
            for name_p in box.find_all("p", recursive=False):
                try:
                    meeting = _parse_meeting(name_p, day, sections)
                except (AttributeError, TypeError, ValueError):
                    logger.warning("Unexpected markup in day %d cell, skipped", day, exc_info=True)
                    continue
                if meeting is not None:
                    meetings.append(meeting)
    return meetings


def parse_timetable(html: str) -> tuple[List[Dict], int]:
    """Return (course fragments, semester total weeks)."""
    soup = BeautifulSoup(html, "html.parser")
    timetable = soup.find(id="timetable")
    if timetable is None:
        raise StructuralError("Could not find timetable table #timetable in HTML.")

    total_weeks = parse_total_weeks(soup)

    # html.parser keeps <tbody> only when the page has one
    rows = timetable.select("tbody > tr") or timetable.find_all("tr")
    courses: List[Dict] = []
    for row in rows:
        courses.extend(_parse_row(row))
    return courses, total_weeks


def parse_payload(html: str, season: str = "summer") -> SourceFragments:
    courses, total_weeks = parse_timetable(html)
    return SourceFragments(
        courses=courses,
        time_slots=preset_time_slots(season),
        config={"semesterStartDate": None, "totalWeeks": total_weeks},
    )
