"""Holiday cache — the single piece of state shared across requests.

The cache holds one immutable HolidaySnapshot (holiday set + diagnostics).
refresh() builds a complete new snapshot and publishes it with a single
attribute assignment, so readers see either the old snapshot or the new
one, never a partial set.

Refresh policy:
    1. Determine the current year in the configured timezone.
    2. Locate BSE_Holidays_<year>.xlsx|.csv.
    3. No file, an empty load, or any read/parse failure -> fallback list.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Union

from almanac.calendar.fallback import fallback_holidays
from almanac.calendar.trading_calendar import TradingCalendar
from almanac.compute.expiry_calendar import generate_expiries
from almanac.config import CalendarConfig, current_year, today
from almanac.ingestion.diagnostics import LoadDiagnostics
from almanac.ingestion.holiday_loader import load_from_lines, load_from_table
from almanac.ingestion.holiday_source import find_holiday_file, read_lines, read_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidaySnapshot:
    """A complete, immutable holiday set with its provenance."""
    holidays: tuple[str, ...]
    diagnostics: LoadDiagnostics
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def load_holiday_file(path: Path) -> tuple[tuple[str, ...], LoadDiagnostics]:
    """Read and load one holiday file, dispatching on its extension.

    Raises:
        ValueError: If the extension is not .xlsx or .csv.
        OSError: If the file cannot be read.
    """
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        rows, sheet_name = read_table(path)
        holidays, diag = load_from_table(rows, file_path=str(path), sheet_name=sheet_name)
        logger.info(f"Loaded holidays from XLSX: {len(holidays)} entries ({path.name})")
    elif suffix == ".csv":
        holidays, diag = load_from_lines(read_lines(path), file_path=str(path))
        logger.info(f"Loaded holidays from CSV: {len(holidays)} entries ({path.name})")
    else:
        raise ValueError(f"Unsupported holiday file type: {path}")
    return holidays, diag


def build_snapshot(config: CalendarConfig, year: Optional[int] = None) -> HolidaySnapshot:
    """Compute a fresh snapshot for a year (default: current year).

    Never raises for source problems; those fall back to the hardcoded list.
    """
    if year is None:
        year = current_year(config.timezone)

    try:
        path = find_holiday_file(
            year, config.holiday_dir, config.file_prefix, config.extensions,
        )
        if path is None:
            logger.warning(f"No holiday file found for {year}; using fallback")
            return HolidaySnapshot(*fallback_holidays(year))

        holidays, diag = load_holiday_file(path)
        if not holidays:
            logger.warning(f"Holiday list empty after loading {path.name}; using fallback")
            return HolidaySnapshot(*fallback_holidays(year))

        return HolidaySnapshot(holidays, diag)
    except Exception as e:
        logger.exception(f"Failed to load holiday file for {year}; using fallback")
        holidays, diag = fallback_holidays(year)
        return HolidaySnapshot(holidays, LoadDiagnostics(
            source=diag.source, count=diag.count, error=f"{type(e).__name__}: {e}",
        ))


class HolidayCache:
    """Owns the current holiday snapshot.

    Usage:
        cache = HolidayCache(CalendarConfig.from_env())
        cache.refresh()
        cache.holidays                    # ("2025-02-26", ...)
        cache.expiries("2025-10-01", 1)   # adjusted Thursdays
    """

    def __init__(
        self,
        config: Optional[CalendarConfig] = None,
        snapshot: Optional[HolidaySnapshot] = None,
    ) -> None:
        self._config = config or CalendarConfig()
        self._snapshot = snapshot or HolidaySnapshot((), LoadDiagnostics(source="fallback"))
        self._refresh_lock = threading.Lock()

    @property
    def config(self) -> CalendarConfig:
        return self._config

    @property
    def snapshot(self) -> HolidaySnapshot:
        return self._snapshot

    @property
    def holidays(self) -> tuple[str, ...]:
        return self._snapshot.holidays

    @property
    def diagnostics(self) -> LoadDiagnostics:
        return self._snapshot.diagnostics

    def refresh(self, year: Optional[int] = None) -> HolidaySnapshot:
        """Rebuild the snapshot and publish it atomically."""
        with self._refresh_lock:
            snapshot = build_snapshot(self._config, year)
            self._snapshot = snapshot
        logger.info(
            f"Holiday cache refreshed: {len(snapshot.holidays)} holidays "
            f"(source={snapshot.diagnostics.source})"
        )
        return snapshot

    def trading_calendar(self) -> TradingCalendar:
        return TradingCalendar(self._snapshot.holidays, self._config.max_shift_days)

    def expiries(
        self,
        start_date: Optional[Union[date, str]] = None,
        months_ahead: Optional[int] = None,
    ) -> tuple[str, ...]:
        """Adjusted expiry series against the current snapshot.

        start_date defaults to today in the configured timezone, months_ahead
        to the configured value.

        Raises:
            ValueError: If the request parameters are invalid.
        """
        if start_date is None:
            start_date = today(self._config.timezone)
        if months_ahead is None:
            months_ahead = self._config.months_ahead
        return generate_expiries(start_date, months_ahead, self.trading_calendar())
