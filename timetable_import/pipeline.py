"""
Import pipeline: raw payload -> adapter -> mapper -> block merge -> gateway.

Nothing is kept between runs. Structural errors from the adapter propagate to
the caller; gateway failures are collected per call in a ``SaveReport`` so a
partial save is visible instead of lost.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .gateway import PersistenceGateway
from .mapper import map_fragments
from .merge import merge_courses
from .models import Course, ScheduleConfig, TimeSlot
from .sources import produce_fragments

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def report(self, message: str) -> None: ...

    def complete(self) -> None: ...


class ConsoleReporter:
    def report(self, message: str) -> None:
        print(message)

    def complete(self) -> None:
        print("All tasks completed.")


@dataclass
class ImportResult:
    provider: str
    config: ScheduleConfig
    courses: List[Course]
    time_slots: List[TimeSlot]
    raw_course_count: int = 0

    @property
    def merged_count(self) -> int:
        return self.raw_course_count - len(self.courses)


@dataclass
class SaveReport:
    succeeded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def partial(self) -> bool:
        return bool(self.failed) and bool(self.succeeded)


def build_schedule(provider: str, payload: Any, **options: Any) -> ImportResult:
    """Run the pure part of the pipeline for one provider payload."""
    fragments = produce_fragments(provider, payload, **options)
    config, courses, time_slots = map_fragments(fragments)
    merged = merge_courses(courses)
    logger.info(
        "%s: %d course record(s), %d after merging, %d time slot(s)",
        provider,
        len(courses),
        len(merged),
        len(time_slots),
    )
    return ImportResult(
        provider=provider,
        config=config,
        courses=merged,
        time_slots=time_slots,
        raw_course_count=len(courses),
    )


def save_schedule(
    result: ImportResult,
    gateway: PersistenceGateway,
    reporter: Optional[Reporter] = None,
) -> SaveReport:
    """
    Hand the records to the gateway, one independent call per collection.
    A failed call does not stop or undo the others.
    """
    reporter = reporter or ConsoleReporter()
    report = SaveReport()

    calls: List[tuple[str, bool, Callable[[], None], str]] = [
        (
            "accept_schedule_config",
            True,
            lambda: gateway.accept_schedule_config(result.config),
            f"Schedule config saved (total weeks: {result.config.total_weeks}).",
        ),
        (
            "accept_courses",
            bool(result.courses),
            lambda: gateway.accept_courses(result.courses),
            f"Courses saved: {result.raw_course_count} parsed, {result.merged_count} merged, "
            f"{len(result.courses)} imported.",
        ),
        (
            "accept_time_slots",
            bool(result.time_slots),
            lambda: gateway.accept_time_slots(result.time_slots),
            f"Time slots saved: {len(result.time_slots)}.",
        ),
    ]

    for operation, has_data, call, success_message in calls:
        if not has_data:
            report.skipped.append(operation)
            reporter.report(f"Nothing to save for {operation}.")
            continue
        try:
            call()
        except Exception as e:
            logger.error("Gateway call %s failed: %s", operation, e)
            report.failed[operation] = str(e)
            reporter.report(f"Saving failed ({operation}): {e}")
            continue
        report.succeeded.append(operation)
        reporter.report(success_message)

    if report.partial:
        reporter.report(
            "Import partially saved: "
            f"{', '.join(report.succeeded)} succeeded, {', '.join(report.failed)} failed."
        )
    elif report.ok:
        reporter.complete()
    return report


def run_import(
    provider: str,
    payload: Any,
    gateway: PersistenceGateway,
    reporter: Optional[Reporter] = None,
    **options: Any,
) -> SaveReport:
    result = build_schedule(provider, payload, **options)
    return save_schedule(result, gateway, reporter)
