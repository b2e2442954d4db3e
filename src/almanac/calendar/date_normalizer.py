"""Date normalisation for hand-maintained holiday sources.

Holiday master files mix spreadsheet date serials with several human date
conventions ("26-Feb-2025", "February 26,2025", "2025-02-26", ...).
Every value goes through one deterministic cascade:

    1. absence (None, NaN, NaT, blank text)         -> None
    2. typed date (datetime, pandas.Timestamp, date) -> its calendar date
    3. number: spreadsheet serial, epoch 1899-12-30  -> epoch + n days
    4. text: free-form parse, then D-MMM-YY[YY], then Month D YYYY

The cascade is total: a malformed cell yields None, never an exception,
so one bad row cannot abort a whole load.

All outputs are Python date objects; the canonical external form is the
ISO string produced by format_canonical().
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# --- Constants ---
# Spreadsheet epoch. Serial 1 is 1899-12-31, serial 60 is the phantom
# 1900-02-29; anchoring at 12-30 keeps every serial after it exact.
EXCEL_EPOCH = date(1899, 12, 30)

_MONTH_ABBREVIATIONS = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}
_MONTH_NAMES = {
    "JANUARY": 1, "FEBRUARY": 2, "MARCH": 3, "APRIL": 4, "MAY": 5, "JUNE": 6,
    "JULY": 7, "AUGUST": 8, "SEPTEMBER": 9, "OCTOBER": 10, "NOVEMBER": 11,
    "DECEMBER": 12, "SEPT": 9,
}

_DD_MMM_YY = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2}|\d{4})$")
_MONTH_D_YYYY = re.compile(r"^([A-Za-z]{3,})\s+(\d{1,2})\s+(\d{2}|\d{4})$")
_DIGITS_ONLY = re.compile(r"^\d+$")
_WHITESPACE = re.compile(r"\s+")

# Two defaults that differ in year, month and day. A free-form parse that
# yields the same date against both never relied on a defaulted component.
_PROBE_DEFAULTS = (datetime(2001, 1, 1), datetime(2002, 2, 2))


def format_canonical(d: date) -> str:
    """Render a date as its canonical YYYY-MM-DD string."""
    return d.strftime("%Y-%m-%d")


def excel_serial_to_date(serial: float) -> date:
    """Convert a spreadsheet day-count serial to a calendar date.

    Fractional serials carry a time of day; the date is the day the
    instant falls in.

    Raises:
        ValueError: If serial is not finite.
        OverflowError: If the result is outside the representable range.
    """
    if not math.isfinite(serial):
        raise ValueError(f"Spreadsheet serial must be finite, got {serial!r}")
    return EXCEL_EPOCH + timedelta(days=math.floor(serial))


def _expand_year(year: int) -> int:
    return 2000 + year if year < 100 else year


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_free_form(text: str) -> Optional[date]:
    """General parse of a cleaned string; None unless it names a full date."""
    if _DIGITS_ONLY.match(text):
        return None
    results = []
    for default in _PROBE_DEFAULTS:
        try:
            results.append(date_parser.parse(text, default=default).date())
        except (ValueError, OverflowError):
            return None
    if results[0] != results[1]:
        return None
    return results[0]


def _parse_dd_mmm_yy(text: str) -> Optional[date]:
    """Strict D[D]-MMM-YY[YY], e.g. 14-Mar-2025 or 2-oct-25."""
    m = _DD_MMM_YY.match(text)
    if m is None:
        return None
    month = _MONTH_ABBREVIATIONS.get(m.group(2).upper())
    if month is None:
        return None
    return _build_date(_expand_year(int(m.group(3))), month, int(m.group(1)))


def _parse_month_word(text: str) -> Optional[date]:
    """Month D YYYY with a spelled or abbreviated month name."""
    m = _MONTH_D_YYYY.match(text)
    if m is None:
        return None
    word = m.group(1).upper()
    month = _MONTH_NAMES.get(word) or _MONTH_ABBREVIATIONS.get(word)
    if month is None:
        return None
    return _build_date(_expand_year(int(m.group(3))), month, int(m.group(2)))


def _clean_text(raw: str) -> str:
    return _WHITESPACE.sub(" ", raw.replace(",", " ")).strip()


def parse_any_date(raw: Any) -> Optional[date]:
    """Parse one raw cell or token of unknown representation.

    Args:
        raw: None, a number (spreadsheet serial), a typed date, or text.

    Returns:
        The calendar date, or None if the value is not a date.
    """
    if raw is None or raw is pd.NaT:
        return None

    if isinstance(raw, datetime):  # includes pandas.Timestamp
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, np.datetime64):
        return None if np.isnat(raw) else pd.Timestamp(raw).date()

    if isinstance(raw, (bool, np.bool_)):
        return None

    if isinstance(raw, (int, float, np.integer, np.floating)):
        try:
            value = float(raw)
        except (OverflowError, TypeError):
            return None
        if not math.isfinite(value):
            return None
        try:
            return excel_serial_to_date(value)
        except (ValueError, OverflowError):
            return None

    if not isinstance(raw, str):
        return None

    text = _clean_text(raw)
    if not text:
        return None

    for strategy in (_parse_free_form, _parse_dd_mmm_yy, _parse_month_word):
        parsed = strategy(text)
        if parsed is not None:
            return parsed

    logger.debug("Unparseable date value: %r", raw)
    return None


def normalize(raw: Any) -> Optional[str]:
    """Parse a raw value straight to its canonical string (None if not a date)."""
    parsed = parse_any_date(raw)
    return format_canonical(parsed) if parsed is not None else None
