"""Almanac Trading Calendar — date normalisation, BSE holidays and trading days.

Canonical dates are YYYY-MM-DD strings; every module here agrees on that
form so holiday sets from files and from the fallback list compare equal.
"""
from almanac.calendar.date_normalizer import (
    format_canonical,
    normalize,
    parse_any_date,
)
from almanac.calendar.fallback import fallback_holidays
from almanac.calendar.trading_calendar import (
    HolidaySetTooDenseError,
    TradingCalendar,
)

__all__ = [
    "format_canonical",
    "normalize",
    "parse_any_date",
    "fallback_holidays",
    "HolidaySetTooDenseError",
    "TradingCalendar",
]
