"""
Fetch a WakeUp timetable share by its share key.

The API answers {"status": 1, "data": "<multi-part blob>", "message": ...};
any other status is a failure.
"""
from __future__ import annotations

import logging

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)

SHARE_URL = "https://i.wakeup.fun/share_schedule/get"
REQUEST_TIMEOUT = 30


def fetch_share_data(share_key: str) -> str:
    """Return the raw share blob for ``share_key``."""
    logger.info("Requesting shared schedule from %s", SHARE_URL)
    try:
        resp = requests.get(SHARE_URL, params={"key": share_key.strip()}, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise TransportError(f"Network request failed: {e}") from e
    if not resp.ok:
        raise TransportError(f"Network request failed, status code: {resp.status_code}")

    try:
        body = resp.json()
    except ValueError as e:
        raise TransportError("Share API response is not JSON.") from e
    if not isinstance(body, dict) or body.get("status") != 1:
        message = body.get("message") if isinstance(body, dict) else body
        raise TransportError(f"Share API returned failure: {message}")

    data = body.get("data")
    if not isinstance(data, str) or not data.strip():
        raise TransportError("Share API returned no schedule data.")
    return data
