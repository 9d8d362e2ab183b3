"""
User-input validators and terminal prompts.

A validator takes the raw input and returns an error message, or None when
the input is acceptable. Prompts refer to validators by registry name.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence

SEMESTER_CHOICES: List[str] = ["1 (first semester)", "2 (second semester)"]
SEASON_CHOICES: List[str] = ["summer", "winter"]


def validate_share_key(key: Optional[str]) -> Optional[str]:
    if key is None or not key.strip():
        return "Share key must not be empty."
    return None


def validate_year_input(value: Optional[str]) -> Optional[str]:
    if value is not None and re.fullmatch(r"[0-9]{4}", value):
        return None
    return "Enter a four-digit academic year, e.g. 2024."


VALIDATORS: Dict[str, Callable[[Optional[str]], Optional[str]]] = {
    "share_key": validate_share_key,
    "academic_year": validate_year_input,
}


def hnvcc_term_id(academic_year: str, semester: int) -> str:
    """'2024', 1 -> '2024-2025-1'."""
    year = int(academic_year)
    return f"{year}-{year + 1}-{semester}"


def prompt_text(
    title: str,
    message: str,
    default: str = "",
    validator: str | None = None,
    input_func: Callable[[str], str] = input,
) -> Optional[str]:
    """Ask until the named validator accepts. EOF cancels and returns None."""
    check = VALIDATORS[validator] if validator else None
    print(title)
    while True:
        try:
            answer = input_func(f"{message} [{default}]: " if default else f"{message}: ")
        except EOFError:
            return None
        answer = answer.strip() or default
        error = check(answer) if check else None
        if error is None:
            return answer
        print(error)


def prompt_selection(
    title: str,
    choices: Sequence[str],
    input_func: Callable[[str], str] = input,
) -> Optional[int]:
    """Return the 0-based index of the chosen item, or None when cancelled."""
    print(title)
    for i, choice in enumerate(choices, start=1):
        print(f"  {i}. {choice}")
    while True:
        try:
            answer = input_func("Select a number (empty to cancel): ").strip()
        except EOFError:
            return None
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return int(answer) - 1
        print(f"Enter a number between 1 and {len(choices)}.")
