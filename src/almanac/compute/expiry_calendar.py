"""Sensex weekly expiry generation.

Produces the Thursday expiry series for a window of calendar months and
adjusts each expiry against the trading calendar.

Convention:
    - Weekly expiries are scheduled on every Thursday of the month.
    - A scheduled expiry that falls on a weekend or holiday moves to the
      preceding trading day (never later).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Union

from almanac.calendar.date_normalizer import format_canonical
from almanac.calendar.trading_calendar import TradingCalendar, parse_canonical

logger = logging.getLogger(__name__)

# --- Constants ---
EXPIRY_WEEKDAY = 3  # Thursday (Monday=0)
DEFAULT_MONTHS_AHEAD = 3


# --- Helper Functions ---

def _add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Shift (year, month) by offset months, rolling over year boundaries."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def thursdays_in_month(year: int, month: int) -> list[date]:
    """Every Thursday of a calendar month, ascending."""
    first = date(year, month, 1)
    offset = (EXPIRY_WEEKDAY - first.weekday()) % 7
    current = first + timedelta(days=offset)

    result = []
    while current.month == month:
        result.append(current)
        current += timedelta(days=7)
    return result


def _validate_request(
    start_date: Union[date, str],
    months_ahead: int,
) -> date:
    if isinstance(months_ahead, bool) or not isinstance(months_ahead, int):
        raise ValueError(f"months_ahead must be an integer, got {months_ahead!r}")
    if months_ahead < 0:
        raise ValueError(f"months_ahead must be >= 0, got {months_ahead}")
    return parse_canonical(start_date)


# --- Expiry Series ---

def generate_raw_expiries(
    start_date: Union[date, str],
    months_ahead: int = DEFAULT_MONTHS_AHEAD,
) -> tuple[str, ...]:
    """Scheduled (unadjusted) Thursdays for months_ahead months.

    The window starts at the first day of start_date's month, so Thursdays
    earlier in that month are included.

    Raises:
        ValueError: If start_date is malformed or months_ahead is negative.
    """
    start = _validate_request(start_date, months_ahead)

    expiries: set[str] = set()
    for m in range(months_ahead):
        year, month = _add_months(start.year, start.month, m)
        expiries.update(format_canonical(d) for d in thursdays_in_month(year, month))
    return tuple(sorted(expiries))


def generate_expiries(
    start_date: Union[date, str],
    months_ahead: int,
    calendar: TradingCalendar,
) -> tuple[str, ...]:
    """Holiday-adjusted expiry series for months_ahead months.

    Raises:
        ValueError: If start_date is malformed or months_ahead is negative.
        HolidaySetTooDenseError: If an expiry cannot be moved to a trading day.
    """
    adjusted: set[str] = set()
    for scheduled in generate_raw_expiries(start_date, months_ahead):
        actual = calendar.adjust_expiry(scheduled)
        if actual != scheduled:
            logger.info(f"Expiry {scheduled} is a non-trading day; moved to {actual}")
        adjusted.add(actual)
    return tuple(sorted(adjusted))
