"""
Fetch the my.cqu.edu.cn timetable through its REST API.

Workflow:
1. Log in inside Chrome (or pass --access-token / --student-id)
2. Read the bearer token from localStorage and the student id from the
   user-name badge ("Zhang San[20240001]")
3. Fetch the current term id
4. Fetch start date, max week, time pattern and timetable concurrently
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from .browser import capture_login_session
from .errors import TransportError

logger = logging.getLogger(__name__)

BASE_URL = "https://my.cqu.edu.cn"
TOKEN_STORAGE_KEY = "cqu_edu_ACCESS_TOKEN"
USER_NAME_SELECTOR = ".trigger-user-name"
REQUEST_TIMEOUT = 30

# Outcomes the mapping cannot do without. A missing start date is tolerated.
REQUIRED_OUTCOMES = ("max_week", "time_slots", "schedule")


def extract_student_id(user_name_text: str | None) -> str | None:
    m = re.search(r"\[(.*?)\]", user_name_text or "")
    return m.group(1) if m and m.group(1) else None


def login_with_browser() -> Tuple[str, str]:
    """Return (access_token, student_id) captured from a logged-in browser."""
    session = capture_login_session(
        BASE_URL,
        storage_keys=[TOKEN_STORAGE_KEY],
        text_selector=USER_NAME_SELECTOR,
    )
    student_id = extract_student_id(session.element_text)
    if student_id is None:
        raise TransportError("Not logged in to my.cqu.edu.cn: no student id on the page.")
    token = (session.local_storage.get(TOKEN_STORAGE_KEY) or "").replace('"', "")
    if not token:
        raise TransportError("No access token found. Make sure you are logged in to my.cqu.edu.cn.")
    return token, student_id


def _api(url: str, token: str, description: str, method: str = "GET", body: Any = None) -> Any:
    try:
        resp = requests.request(
            method,
            url,
            headers={"Authorization": f"Bearer {token}"},
            json=body,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise TransportError(f"Failed to fetch {description}: {e}") from e
    if not resp.ok:
        raise TransportError(f"Failed to fetch {description}: {resp.status_code} {resp.reason}")
    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(f"Failed to fetch {description}: response is not JSON") from e


def _data(response: Any) -> Any:
    return response.get("data") if isinstance(response, dict) else None


def get_term_id(token: str) -> Any:
    resp = _api(f"{BASE_URL}/api/resourceapi/session/info-detail", token, "term info")
    term_id = resp.get("curSessionId") if isinstance(resp, dict) else None
    if term_id is None:
        raise TransportError("Term info response has no curSessionId.")
    return term_id


def get_start_date(term_id: Any, token: str) -> Any:
    data = _data(_api(f"{BASE_URL}/api/resourceapi/session/info/{term_id}", token, "term detail"))
    return data.get("beginDate") if isinstance(data, dict) else None


def get_max_week(term_id: Any, token: str) -> Any:
    return _data(_api(f"{BASE_URL}/api/timetable/course/maxWeek/{term_id}", token, "max week"))


def get_time_slots(token: str) -> Any:
    data = _data(_api(
        f"{BASE_URL}/api/workspace/time-pattern/session-time-pattern", token, "time pattern"
    ))
    return data.get("classPeriodVOS") if isinstance(data, dict) else None


def get_schedule(term_id: Any, token: str, student_id: str) -> Any:
    resp = _api(
        f"{BASE_URL}/api/timetable/class/timetable/student/my-table-detail?sessionId={term_id}",
        token,
        "timetable",
        method="POST",
        body=[student_id],
    )
    return resp.get("classTimetableVOList") if isinstance(resp, dict) else None


def collect_outcomes(tasks: Dict[str, Callable[[], Any]]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Run independent fetches concurrently and wait for all of them.
    Returns (values, errors); one failure never cancels the others.
    """
    values: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=max(len(tasks), 1)) as pool:
        futures = {name: pool.submit(task) for name, task in tasks.items()}
        for name, future in futures.items():
            try:
                values[name] = future.result()
            except Exception as e:
                logger.warning("Fetching %s failed: %s", name, e)
                errors[name] = str(e)
    return values, errors


def fetch_payload(token: str, student_id: str) -> Dict[str, Optional[Any]]:
    """Fetch everything ``cqu_api.parse_payload`` needs."""
    term_id = get_term_id(token)
    logger.info("Current term id: %s", term_id)

    values, errors = collect_outcomes({
        "start_date": lambda: get_start_date(term_id, token),
        "max_week": lambda: get_max_week(term_id, token),
        "time_slots": lambda: get_time_slots(token),
        "schedule": lambda: get_schedule(term_id, token, student_id),
    })
    missing = [name for name in REQUIRED_OUTCOMES if values.get(name) is None]
    if missing:
        details = "; ".join(f"{name}: {errors.get(name, 'empty response')}" for name in missing)
        raise TransportError(f"Could not fetch all timetable data ({details}).")
    return {
        "start_date": values.get("start_date"),
        "max_week": values["max_week"],
        "time_slots": values["time_slots"],
        "schedule": values["schedule"],
    }
