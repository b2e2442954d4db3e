"""Command-line runner: JSON payloads and request validation."""

import importlib.util
import json
from pathlib import Path

import pytest

_SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "run_sensex_expiries.py"


@pytest.fixture(scope="module")
def runner():
    spec = importlib.util.spec_from_file_location("run_sensex_expiries", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def holiday_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("ALMANAC_HOLIDAY_DIR", str(tmp_path))
    monkeypatch.delenv("ALMANAC_MONTHS_AHEAD", raising=False)
    monkeypatch.delenv("ALMANAC_MAX_SHIFT_DAYS", raising=False)
    return tmp_path


class TestCommands:

    def test_debug_reports_fallback(self, runner, holiday_dir, capsys) -> None:
        assert runner.main(["debug"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["diagnostics"]["source"] == "fallback"

    def test_expiries(self, runner, holiday_dir, capsys) -> None:
        assert runner.main(
            ["expiries", "--start-date", "2025-10-01", "--months-ahead", "1"]
        ) == 0
        payload = json.loads(capsys.readouterr().out)
        assert len(payload["expiries"]) == 5
        assert payload["expiries"] == sorted(payload["expiries"])

    def test_reload_reads_file(self, runner, holiday_dir, capsys) -> None:
        from almanac.config import current_year
        year = current_year()
        (holiday_dir / f"BSE_Holidays_{year}.csv").write_text(f"{year}-08-15,Independence Day\n")
        assert runner.main(["reload"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "reloaded"
        assert payload["holidays"] == [f"{year}-08-15"]
        assert payload["diagnostics"]["source"] == "text"

    def test_holidays_with_dir_override(self, runner, tmp_path, capsys) -> None:
        assert runner.main(["--holiday-dir", str(tmp_path), "holidays"]) == 0
        assert "holidays" in json.loads(capsys.readouterr().out)

    def test_bad_start_date_exit_code(self, runner, holiday_dir, capsys) -> None:
        assert runner.main(["expiries", "--start-date", "01/10/2025"]) == 2
        assert capsys.readouterr().out == ""

    def test_reload_refreshes_once(self, runner, holiday_dir, monkeypatch, capsys) -> None:
        from almanac.service.holiday_cache import HolidayCache
        calls = []
        original = HolidayCache.refresh

        def counting_refresh(self, year=None):
            calls.append(year)
            return original(self, year)

        monkeypatch.setattr(HolidayCache, "refresh", counting_refresh)
        assert runner.main(["reload"]) == 0
        assert len(calls) == 1
        assert json.loads(capsys.readouterr().out)["status"] == "reloaded"

    def test_unknown_timezone_exit_code(self, runner, holiday_dir, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ALMANAC_TIMEZONE", "Mars/Olympus")
        assert runner.main(["holidays"]) == 2
        assert capsys.readouterr().out == ""
