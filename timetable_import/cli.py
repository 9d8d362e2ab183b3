"""
Command-line interface: fetch (or load) a timetable, normalize it and save
the canonical records.
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

from . import __version__
from .cqu_fetch import fetch_payload as fetch_cqu_payload
from .cqu_fetch import login_with_browser as cqu_login
from .errors import StructuralError, TransportError
from .export import TZ_CN, export
from .gateway import JsonDirectoryGateway
from .hnvcc_fetch import fetch_timetable_html
from .hnvcc_fetch import login_with_browser as hnvcc_login
from .logging_setup import setup_logging
from .pipeline import ConsoleReporter, build_schedule, save_schedule
from .sources import ADAPTERS, PROVIDER_NAMES
from .validators import (
    SEASON_CHOICES,
    SEMESTER_CHOICES,
    VALIDATORS,
    hnvcc_term_id,
    prompt_selection,
    prompt_text,
)
from .wakeup_fetch import fetch_share_data


def _load_payload(provider: str, path: Path) -> Any:
    """Read a saved payload: JSON for cqu, blob text for wakeup, HTML for hnvcc."""
    text = path.read_text(encoding="utf-8", errors="ignore")
    if provider == "cqu":
        return json.loads(text)
    return text


def _checked(value: str, validator: str) -> str:
    error = VALIDATORS[validator](value)
    if error:
        raise ValueError(error)
    return value


def _fetch_wakeup(args) -> Optional[str]:
    if args.share_key:
        key = _checked(args.share_key, "share_key")
    else:
        key = prompt_text(
            "WakeUp share key",
            "Enter the key from the share link",
            validator="share_key",
        )
        if key is None:
            return None
    return fetch_share_data(key)


def _fetch_hnvcc(args) -> Optional[str]:
    if args.year:
        year = _checked(args.year, "academic_year")
    else:
        current_year = str(date.today().year)
        year = prompt_text(
            "Academic year",
            f"Enter the academic year to import (e.g. {current_year})",
            default=current_year,
            validator="academic_year",
        )
        if year is None:
            return None

    semester = args.semester
    if semester is None:
        index = prompt_selection("Semester", SEMESTER_CHOICES)
        if index is None:
            return None
        semester = index + 1

    term_id = hnvcc_term_id(year, semester)
    print(f"Fetching academic year {year}, semester {semester} ({term_id})...")
    session = hnvcc_login()
    return fetch_timetable_html(term_id, session)


def _fetch_cqu(args) -> dict:
    if args.access_token and args.student_id:
        token, student_id = args.access_token, args.student_id
    else:
        token, student_id = cqu_login()
    return fetch_cqu_payload(token, student_id)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="timetable-import",
        description=(
            "Import a course timetable and save it as canonical JSON records.\n"
            + "\n".join(f"- {key}: {name}" for key, name in PROVIDER_NAMES.items())
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--provider", required=True, choices=sorted(ADAPTERS), help="Timetable source.")
    parser.add_argument(
        "--payload",
        metavar="PATH",
        help="Parse a saved payload instead of fetching (cqu: JSON, wakeup: share blob, hnvcc: HTML).",
    )
    parser.add_argument(
        "-o",
        "--out-dir",
        default="timetable_import_out",
        help="Directory for config.json, courses.json and time_slots.json. Default: timetable_import_out",
    )
    parser.add_argument(
        "-f",
        "--export",
        choices=["ics", "csv", "json"],
        help="Also export the schedule to a single file in this format.",
    )
    parser.add_argument("--export-path", metavar="PATH", help="Export file path. Default: <out-dir>/timetable.<ext>")
    parser.add_argument("--timezone", default=TZ_CN, help=f"Timezone for ICS export. Default: {TZ_CN}")

    # Provider options
    parser.add_argument("--share-key", help="(wakeup) Share key; prompted when omitted.")
    parser.add_argument("--access-token", help="(cqu) Bearer token; browser login when omitted.")
    parser.add_argument("--student-id", help="(cqu) Student id; browser login when omitted.")
    parser.add_argument("--year", help="(hnvcc) Four-digit academic year, e.g. 2024.")
    parser.add_argument("--semester", type=int, choices=[1, 2], help="(hnvcc) Semester number.")
    parser.add_argument("--season", choices=SEASON_CHOICES, help="(hnvcc) Daily time-slot preset.")

    parser.add_argument("--log-level", default="WARNING", help="Logging level. Default: WARNING")
    parser.add_argument("--log-file", metavar="PATH", help="Also write logs to this file.")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    options: dict[str, Any] = {}
    if args.provider == "hnvcc":
        season = args.season
        if season is None and not args.payload:
            index = prompt_selection("Daily schedule preset", SEASON_CHOICES)
            if index is None:
                print("Import cancelled.")
                return 1
            season = SEASON_CHOICES[index]
        options["season"] = season or "summer"

    try:
        if args.payload:
            payload = _load_payload(args.provider, Path(args.payload))
        elif args.provider == "wakeup":
            payload = _fetch_wakeup(args)
        elif args.provider == "hnvcc":
            payload = _fetch_hnvcc(args)
        else:
            payload = _fetch_cqu(args)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading payload: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except TransportError as e:
        print(f"Error fetching timetable: {e}", file=sys.stderr)
        return 1
    if payload is None:
        print("Import cancelled.")
        return 1

    try:
        result = build_schedule(args.provider, payload, **options)
    except StructuralError as e:
        print(f"Error parsing timetable: {e}", file=sys.stderr)
        return 1

    if not result.courses:
        print("No courses found. Check the login state, the selected term, or whether the timetable is empty.")

    report = save_schedule(result, JsonDirectoryGateway(args.out_dir), ConsoleReporter())

    if args.export:
        ext = f".{args.export}"
        out_path = Path(args.export_path) if args.export_path else Path(args.out_dir) / f"timetable{ext}"
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            export(result.config, result.courses, result.time_slots, out_path, args.export, args.timezone)
        except (OSError, ValueError, KeyError) as e:
            # KeyError: pytz.UnknownTimeZoneError
            print(f"Error exporting timetable: {e}", file=sys.stderr)
            return 1
        print(f"Exported {len(result.courses)} course(s) to {out_path}")

    if report.ok:
        return 0
    return 2 if report.partial else 1


if __name__ == "__main__":
    sys.exit(main())
