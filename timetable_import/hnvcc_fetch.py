"""
Fetch the HNVCC timetable page for one term.

The academic affairs system keeps the login in session cookies, so the user
logs in inside Chrome and the cookies are reused for the timetable request.
"""
from __future__ import annotations

import logging

import requests

from .browser import capture_login_session
from .errors import TransportError

logger = logging.getLogger(__name__)

LOGIN_URL = "http://jwxt.hnvcc.edu.cn/jsxsd/"
TIMETABLE_URL = "http://jwxt.hnvcc.edu.cn/jsxsd/framework/mainV_index_loadkb.htmlx"
REQUEST_TIMEOUT = 30


def check_logged_in(page_title: str) -> None:
    if "登录" in page_title or "Login" in page_title:
        raise TransportError("Please log in to the academic affairs system first.")


def login_with_browser() -> requests.Session:
    session = capture_login_session(LOGIN_URL)
    check_logged_in(session.title)
    return session.to_requests_session()


def fetch_timetable_html(term_id: str, session: requests.Session) -> str:
    """``term_id`` is the xnxqid, e.g. '2024-2025-1'."""
    logger.info("Requesting timetable for %s", term_id)
    try:
        resp = session.get(
            TIMETABLE_URL,
            params={"rq": "all", "xnxqid": term_id, "xswk": "false"},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise TransportError(f"Timetable request failed: {e}") from e
    if not resp.ok:
        raise TransportError(
            f"Timetable request failed with status {resp.status_code}. Check your login state."
        )
    return resp.text
