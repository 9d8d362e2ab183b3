"""
Persistence gateway: where finished canonical records go.

The three accept calls are independent and not transactional. A failing
call raises; the caller decides how to report it. ``JsonDirectoryGateway``
writes one JSON file per call.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Protocol

from .errors import PersistenceError
from .models import Course, ScheduleConfig, TimeSlot

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    def accept_schedule_config(self, config: ScheduleConfig) -> None: ...

    def accept_courses(self, courses: List[Course]) -> None: ...

    def accept_time_slots(self, slots: List[TimeSlot]) -> None: ...


class JsonDirectoryGateway:
    """Write config.json, courses.json and time_slots.json into ``out_dir``."""

    CONFIG_FILE = "config.json"
    COURSES_FILE = "courses.json"
    TIME_SLOTS_FILE = "time_slots.json"

    def __init__(self, out_dir: str | Path):
        self.out_dir = Path(out_dir)

    def _write(self, operation: str, filename: str, payload) -> None:
        path = self.out_dir / filename
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(operation, f"could not write {path}: {e}") from e
        logger.info("Wrote %s", path)

    def accept_schedule_config(self, config: ScheduleConfig) -> None:
        self._write("accept_schedule_config", self.CONFIG_FILE, config.to_dict())

    def accept_courses(self, courses: List[Course]) -> None:
        self._write("accept_courses", self.COURSES_FILE, [c.to_dict() for c in courses])

    def accept_time_slots(self, slots: List[TimeSlot]) -> None:
        self._write("accept_time_slots", self.TIME_SLOTS_FILE, [s.to_dict() for s in slots])
