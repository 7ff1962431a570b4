"""
Date helpers for event records.

Events store dates as ISO ``YYYY-MM-DD``; the application displays them
as ``DD/MM/YYYY``.
"""

from __future__ import annotations

import re
from datetime import date

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def format_date_br(date_string: str) -> str:
    """Format ``YYYY-MM-DD`` as ``DD/MM/YYYY``.

    Strings that already contain a slash are returned unchanged.
    """
    if not date_string:
        return ""
    if "/" in date_string:
        return date_string
    return "/".join(reversed(date_string.split("-")))


def convert_br_to_iso(date_br: str) -> str:
    """Convert ``DD/MM/YYYY`` to ``YYYY-MM-DD``.

    ISO strings are returned unchanged.
    """
    if not date_br:
        return ""
    if _ISO_DATE_RE.match(date_br):
        return date_br
    day, month, year = date_br.split("/")
    return f"{year}-{month}-{day}"


def today_iso(today: date | None = None) -> str:
    return (today or date.today()).isoformat()


def today_br(today: date | None = None) -> str:
    return format_date_br(today_iso(today))


def time_to_minutes(time: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    hours, minutes = (int(part) for part in time.split(":"))
    return hours * 60 + minutes
