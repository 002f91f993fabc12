"""Deadline text parsing for Indian government listings.

Pages mix DD/MM/YYYY (the local convention), ISO dates and English month
names. Only dates strictly after today are accepted as deadlines.
"""
from __future__ import annotations

import logging
import re
from datetime import date, timedelta

from policy_monitor.config import settings

logger = logging.getLogger(__name__)

_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

_MONTH_NUMBERS = {
    name.lower(): index for index, name in enumerate(_MONTHS.split("|"), start=1)
}

# Tried in order; the first pattern producing a valid future date wins
DAY_FIRST_RE = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})")
YEAR_FIRST_RE = re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})")
DAY_MONTH_NAME_RE = re.compile(rf"(\d{{1,2}})\s+({_MONTHS})[a-z]*\.?\s+(\d{{4}})", re.IGNORECASE)
MONTH_NAME_DAY_RE = re.compile(rf"({_MONTHS})[a-z]*\.?\s+(\d{{1,2}}),?\s+(\d{{4}})", re.IGNORECASE)
ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def _from_numeric(groups: tuple[str, ...], *, year_first: bool) -> date:
    if year_first:
        year, month, day = groups
    else:
        day, month, year = groups
    return date(int(year), int(month), int(day))


def _from_month_name(groups: tuple[str, ...]) -> date:
    """Build a date from a month-name match, locating the 4-digit year token."""
    month_token = next(g for g in groups if not g.isdigit())
    numbers = [g for g in groups if g.isdigit()]
    year = next(n for n in numbers if len(n) == 4)
    day = next(n for n in numbers if len(n) <= 2)
    return date(int(year), _MONTH_NUMBERS[month_token[:3].lower()], int(day))


_PATTERNS = [
    (DAY_FIRST_RE, lambda g: _from_numeric(g, year_first=False)),
    (YEAR_FIRST_RE, lambda g: _from_numeric(g, year_first=True)),
    (DAY_MONTH_NAME_RE, _from_month_name),
    (MONTH_NAME_DAY_RE, _from_month_name),
    (ISO_RE, lambda g: _from_numeric(g, year_first=True)),
]


def parse_deadline(text: str | None, *, today: date | None = None) -> str | None:
    """Parse free-form deadline text into ``YYYY-MM-DD``.

    Returns None when no pattern yields a valid date strictly after *today*.
    Never raises.
    """
    if not text:
        return None
    today = today or date.today()

    for pattern, build in _PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        try:
            parsed = build(m.groups())
        except (ValueError, KeyError, StopIteration) as e:
            logger.debug("Error parsing date %r: %s", text, e)
            continue
        if parsed > today:
            return parsed.isoformat()
    return None


def default_deadline(*, today: date | None = None, days: int | None = None) -> str:
    """Fallback deadline: today + DEFAULT_DEADLINE_DAYS."""
    today = today or date.today()
    days = days if days is not None else settings.DEFAULT_DEADLINE_DAYS
    return (today + timedelta(days=days)).isoformat()


def days_until(deadline: str | None, *, today: date | None = None) -> int | None:
    """Days from *today* to *deadline*; None when the deadline is missing or malformed."""
    if not deadline:
        return None
    try:
        dl = date.fromisoformat(deadline[:10])
    except (ValueError, TypeError):
        return None
    return (dl - (today or date.today())).days
