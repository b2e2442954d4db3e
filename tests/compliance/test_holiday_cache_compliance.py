"""Compliance tests for holiday file discovery, refresh policy and the cache.

File-backed tests write real .xlsx/.csv files to tmp_path.
"""

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from almanac.calendar.fallback import FALLBACK_HOLIDAYS, fallback_holidays
from almanac.config import CalendarConfig, today
from almanac.ingestion.holiday_source import find_holiday_file, read_lines, read_table
from almanac.service.holiday_cache import HolidayCache, build_snapshot, load_holiday_file

FALLBACK_2025 = (
    "2025-02-26", "2025-03-14", "2025-03-31", "2025-04-10", "2025-04-14",
    "2025-04-18", "2025-05-01", "2025-08-15", "2025-08-27", "2025-10-02",
    "2025-10-21", "2025-10-22", "2025-11-05", "2025-12-25",
)


def _write_xlsx(path: Path, rows: list) -> Path:
    pd.DataFrame(rows).to_excel(path, header=False, index=False, engine="openpyxl")
    return path


@pytest.fixture
def config(tmp_path: Path) -> CalendarConfig:
    return CalendarConfig(holiday_dir=str(tmp_path))


class TestFallback:
    """Hardcoded list for 2025; nothing for other years."""

    def test_2025_normalised_and_sorted(self) -> None:
        holidays, diag = fallback_holidays(2025)
        assert holidays == FALLBACK_2025
        assert diag.source == "fallback"
        assert diag.count == 14

    def test_raw_entries_are_human_formats(self) -> None:
        assert "February 26,2025" in FALLBACK_HOLIDAYS[2025]
        assert "14-Mar-2025" in FALLBACK_HOLIDAYS[2025]

    def test_unknown_year_is_empty(self) -> None:
        holidays, diag = fallback_holidays(2031)
        assert holidays == ()
        assert diag.count == 0


class TestFileDiscovery:

    def test_finds_xlsx_for_year(self, tmp_path: Path) -> None:
        _write_xlsx(tmp_path / "BSE_Holidays_2025.xlsx", [["2025-02-26"]])
        (tmp_path / "BSE_Holidays_2024.csv").write_text("2024-01-26\n")
        assert find_holiday_file(2025, tmp_path) == tmp_path / "BSE_Holidays_2025.xlsx"

    def test_case_insensitive_name(self, tmp_path: Path) -> None:
        (tmp_path / "bse_holidays_2025.CSV").write_text("2025-02-26\n")
        assert find_holiday_file(2025, tmp_path) == tmp_path / "bse_holidays_2025.CSV"

    def test_first_match_by_name(self, tmp_path: Path) -> None:
        (tmp_path / "BSE_Holidays_2025.csv").write_text("2025-02-26\n")
        _write_xlsx(tmp_path / "BSE_Holidays_2025.xlsx", [["2025-02-26"]])
        assert find_holiday_file(2025, tmp_path).suffix == ".csv"

    def test_missing_returns_none(self, tmp_path: Path) -> None:
        (tmp_path / "holidays.csv").write_text("2025-02-26\n")
        assert find_holiday_file(2025, tmp_path) is None

    def test_missing_directory_returns_none(self, tmp_path: Path) -> None:
        assert find_holiday_file(2025, tmp_path / "absent") is None


class TestReaders:

    def test_read_table_keeps_raw_cells(self, tmp_path: Path) -> None:
        path = _write_xlsx(tmp_path / "h.xlsx", [
            ["Holiday", "Date"],
            ["Holi", "14-Mar-2025"],
            ["Maharashtra Day", 45778],
            ["Christmas", datetime(2025, 12, 25)],
            ["Blank", None],
        ])
        rows, sheet_name = read_table(path)
        assert sheet_name == "Sheet1"
        assert len(rows) == 5
        assert rows[1] == ["Holi", "14-Mar-2025"]
        assert rows[2][1] == 45778
        assert rows[4][1] is None

    def test_read_lines_strips_bom(self, tmp_path: Path) -> None:
        path = tmp_path / "h.csv"
        path.write_bytes("\ufeff26-Feb-2025,Mahashivratri\r\n14-Mar-2025,Holi\r\n".encode("utf-8"))
        assert read_lines(path) == ["26-Feb-2025,Mahashivratri", "14-Mar-2025,Holi"]

    def test_load_holiday_file_xlsx(self, tmp_path: Path) -> None:
        path = _write_xlsx(tmp_path / "BSE_Holidays_2025.xlsx", [
            ["Holiday", "Date", "Day"],
            ["Holi", "14-Mar-2025", "Friday"],
            ["Maharashtra Day", 45778, "Thursday"],
            ["Christmas", datetime(2025, 12, 25), "Thursday"],
        ])
        holidays, diag = load_holiday_file(path)
        assert holidays == ("2025-03-14", "2025-05-01", "2025-12-25")
        assert diag.source == "table"
        assert diag.sheet_name == "Sheet1"
        assert diag.best_col == 1

    def test_load_holiday_file_rejects_other_types(self, tmp_path: Path) -> None:
        path = tmp_path / "BSE_Holidays_2025.txt"
        path.write_text("2025-02-26\n")
        with pytest.raises(ValueError, match="Unsupported"):
            load_holiday_file(path)


class TestRefreshPolicy:
    """Missing, empty or broken sources fall back to the hardcoded list."""

    def test_no_file_uses_fallback(self, config: CalendarConfig) -> None:
        snapshot = build_snapshot(config, 2025)
        assert snapshot.holidays == FALLBACK_2025
        assert snapshot.diagnostics.source == "fallback"

    def test_csv_source_used(self, config: CalendarConfig, tmp_path: Path) -> None:
        (tmp_path / "BSE_Holidays_2025.csv").write_text(
            "Holiday,Date\nMahashivratri,26-Feb-2025\nHoli,14-Mar-2025\n"
        )
        snapshot = build_snapshot(config, 2025)
        assert snapshot.holidays == ("2025-02-26", "2025-03-14")
        assert snapshot.diagnostics.source == "text"
        assert snapshot.diagnostics.row_count == 3

    def test_empty_source_uses_fallback(
        self, config: CalendarConfig, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        (tmp_path / "BSE_Holidays_2025.csv").write_text("Holiday,Date\n\n")
        with caplog.at_level(logging.WARNING):
            snapshot = build_snapshot(config, 2025)
        assert snapshot.holidays == FALLBACK_2025
        assert "empty" in caplog.text

    def test_corrupt_file_uses_fallback(self, config: CalendarConfig, tmp_path: Path) -> None:
        (tmp_path / "BSE_Holidays_2025.xlsx").write_bytes(b"not a workbook")
        snapshot = build_snapshot(config, 2025)
        assert snapshot.holidays == FALLBACK_2025
        assert snapshot.diagnostics.source == "fallback"
        assert snapshot.diagnostics.error is not None

    def test_other_year_without_file_is_empty(self, config: CalendarConfig) -> None:
        snapshot = build_snapshot(config, 2031)
        assert snapshot.holidays == ()
        assert snapshot.diagnostics.source == "fallback"


class TestHolidayCache:
    """The cache swaps whole snapshots and serves expiries from the current one."""

    def test_starts_empty(self, config: CalendarConfig) -> None:
        cache = HolidayCache(config)
        assert cache.holidays == ()

    def test_refresh_replaces_snapshot(self, config: CalendarConfig, tmp_path: Path) -> None:
        cache = HolidayCache(config)
        first = cache.refresh(2025)
        assert cache.holidays == FALLBACK_2025

        (tmp_path / "BSE_Holidays_2025.csv").write_text("2025-10-02\n")
        second = cache.refresh(2025)
        assert cache.snapshot is second
        assert second is not first
        assert first.holidays == FALLBACK_2025
        assert cache.holidays == ("2025-10-02",)

    def test_expiries_use_cached_holidays(self, config: CalendarConfig, tmp_path: Path) -> None:
        (tmp_path / "BSE_Holidays_2025.csv").write_text("2025-10-02\n")
        cache = HolidayCache(config)
        cache.refresh(2025)
        assert cache.expiries("2025-10-01", 1) == (
            "2025-10-01", "2025-10-09", "2025-10-16", "2025-10-23", "2025-10-30",
        )

    def test_expiries_default_window(self, tmp_path: Path) -> None:
        cache = HolidayCache(CalendarConfig(holiday_dir=str(tmp_path), months_ahead=2))
        expiries = cache.expiries()
        assert len(expiries) in (8, 9, 10)
        assert expiries[0][:7] == today()[:7]

    def test_invalid_request_raises(self, config: CalendarConfig) -> None:
        with pytest.raises(ValueError):
            HolidayCache(config).expiries("not-a-date", 1)


class TestConfig:

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("ALMANAC_HOLIDAY_DIR", str(tmp_path))
        monkeypatch.setenv("ALMANAC_MONTHS_AHEAD", "6")
        monkeypatch.delenv("ALMANAC_TIMEZONE", raising=False)
        monkeypatch.delenv("ALMANAC_MAX_SHIFT_DAYS", raising=False)
        config = CalendarConfig.from_env()
        assert config.holiday_dir == str(tmp_path)
        assert config.months_ahead == 6
        assert config.timezone == "Asia/Kolkata"
        assert config.max_shift_days == 14

    def test_bad_integer_rejected(self) -> None:
        with pytest.raises(ValueError, match="ALMANAC_MONTHS_AHEAD"):
            CalendarConfig.from_env({"ALMANAC_MONTHS_AHEAD": "three"})

    def test_unknown_timezone_rejected(self) -> None:
        with pytest.raises(ValueError, match="Mars/Olympus"):
            CalendarConfig(timezone="Mars/Olympus")

    def test_unknown_timezone_from_env_rejected(self) -> None:
        with pytest.raises(ValueError, match="timezone"):
            CalendarConfig.from_env({"ALMANAC_TIMEZONE": "Mars/Olympus"})

    def test_negative_months_rejected(self) -> None:
        with pytest.raises(ValueError):
            CalendarConfig(months_ahead=-1)

    def test_today_is_canonical(self) -> None:
        value = today("Asia/Kolkata")
        assert len(value) == 10 and value[4] == "-" and value[7] == "-"
