"""BSE Trading Calendar — weekend/holiday classification and backward shifting.

Design Principles:
    - A trading day is a weekday (Mon-Fri) that is NOT in the holiday set.
    - Holiday membership is exact canonical-string (YYYY-MM-DD) match.
    - Weekday classification uses date.weekday(), never the host locale.
    - Backward navigation is bounded: a holiday set that blocks every day
      of the search window is a configuration error, not a reason to spin.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Iterable, Union

from almanac.calendar.date_normalizer import format_canonical

# --- Constants ---
DEFAULT_MAX_SHIFT_DAYS = 14

# Weekday constants (Monday=0 ... Sunday=6)
_SATURDAY = 5

_CANONICAL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]


class HolidaySetTooDenseError(ValueError):
    """Raised when no trading day exists within the backward search window."""
    pass


def parse_canonical(value: DateLike) -> date:
    """Convert a canonical YYYY-MM-DD string (or a date) to a date.

    Raises:
        ValueError: If the string is not a valid canonical date.
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _CANONICAL_DATE.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    return date.fromisoformat(value)


class TradingCalendar:
    """Trading calendar over a normalised holiday set.

    Usage:
        cal = TradingCalendar(["2025-10-02"])
        cal.is_non_trading_day("2025-10-02")            # True (holiday)
        cal.shift_to_previous_trading_day("2025-10-02")  # "2025-10-01"
    """

    def __init__(
        self,
        holidays: Iterable[str] = (),
        max_shift_days: int = DEFAULT_MAX_SHIFT_DAYS,
    ) -> None:
        """Initialise calendar from canonical holiday strings.

        Args:
            holidays: Canonical YYYY-MM-DD strings.
            max_shift_days: Largest number of days shift_to_previous_trading_day
                may step back before giving up.

        Raises:
            ValueError: If a holiday is not a valid canonical date, or
                max_shift_days is not positive.
        """
        if max_shift_days < 1:
            raise ValueError(f"max_shift_days must be >= 1, got {max_shift_days}")

        holiday_set: set[str] = set()
        for h in holidays:
            holiday_set.add(format_canonical(parse_canonical(h)))

        self._holiday_set = frozenset(holiday_set)
        self._max_shift_days = max_shift_days

    # --- Core Trading Day Functions ---

    def is_non_trading_day(self, d: DateLike) -> bool:
        """True if d is a Saturday, a Sunday, or a member of the holiday set."""
        day = parse_canonical(d)
        if day.weekday() >= _SATURDAY:
            return True
        return format_canonical(day) in self._holiday_set

    def is_trading_day(self, d: DateLike) -> bool:
        return not self.is_non_trading_day(d)

    def shift_to_previous_trading_day(self, d: DateLike) -> str:
        """Return the nearest trading day strictly before d.

        Args:
            d: Reference date.

        Returns:
            Canonical string of the most recent trading day before d.

        Raises:
            HolidaySetTooDenseError: If every one of the max_shift_days
                days before d is a non-trading day.
        """
        start = parse_canonical(d)
        candidate = start
        for _ in range(self._max_shift_days):
            candidate -= timedelta(days=1)
            if not self.is_non_trading_day(candidate):
                return format_canonical(candidate)
        raise HolidaySetTooDenseError(
            f"No trading day within {self._max_shift_days} days before "
            f"{format_canonical(start)}; holiday set is too dense."
        )

    def adjust_expiry(self, d: DateLike) -> str:
        """Keep a scheduled expiry that is a trading day, else move it earlier.

        Expiries roll to the preceding trading day, never later.
        """
        if self.is_non_trading_day(d):
            return self.shift_to_previous_trading_day(d)
        return format_canonical(parse_canonical(d))

    # --- Holiday Information ---

    @property
    def holidays(self) -> tuple[str, ...]:
        """Sorted canonical holiday strings."""
        return tuple(sorted(self._holiday_set))
