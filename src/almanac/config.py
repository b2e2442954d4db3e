"""Runtime configuration for holiday refresh and expiry generation.

Values default to module constants and may be overridden from the
environment (ALMANAC_* variables) by CalendarConfig.from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import pandas as pd

from almanac.calendar.date_normalizer import format_canonical
from almanac.calendar.trading_calendar import DEFAULT_MAX_SHIFT_DAYS
from almanac.compute.expiry_calendar import DEFAULT_MONTHS_AHEAD

# --- Constants ---
DEFAULT_TIMEZONE = "Asia/Kolkata"  # BSE exchange time
HOLIDAY_FILE_PREFIX = "BSE_Holidays_"
HOLIDAY_FILE_EXTENSIONS: tuple[str, ...] = (".xlsx", ".csv")

ENV_HOLIDAY_DIR = "ALMANAC_HOLIDAY_DIR"
ENV_TIMEZONE = "ALMANAC_TIMEZONE"
ENV_MONTHS_AHEAD = "ALMANAC_MONTHS_AHEAD"
ENV_MAX_SHIFT_DAYS = "ALMANAC_MAX_SHIFT_DAYS"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class CalendarConfig:
    """Where holiday files live and how expiries are generated."""
    holiday_dir: str = "."
    file_prefix: str = HOLIDAY_FILE_PREFIX
    extensions: tuple[str, ...] = HOLIDAY_FILE_EXTENSIONS
    timezone: str = DEFAULT_TIMEZONE
    months_ahead: int = DEFAULT_MONTHS_AHEAD
    max_shift_days: int = DEFAULT_MAX_SHIFT_DAYS

    def __post_init__(self) -> None:
        if self.months_ahead < 0:
            raise ValueError(f"months_ahead must be >= 0, got {self.months_ahead}")
        if self.max_shift_days < 1:
            raise ValueError(f"max_shift_days must be >= 1, got {self.max_shift_days}")
        try:
            pd.Timestamp.now(tz=self.timezone)
        except Exception as e:
            raise ValueError(f"Unknown timezone {self.timezone!r}: {e}") from None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CalendarConfig":
        """Build a config from ALMANAC_* environment variables.

        Raises:
            ValueError: If an integer variable does not parse.
        """
        if env is None:
            env = os.environ
        return cls(
            holiday_dir=env.get(ENV_HOLIDAY_DIR) or os.getcwd(),
            timezone=env.get(ENV_TIMEZONE) or DEFAULT_TIMEZONE,
            months_ahead=_env_int(env, ENV_MONTHS_AHEAD, DEFAULT_MONTHS_AHEAD),
            max_shift_days=_env_int(env, ENV_MAX_SHIFT_DAYS, DEFAULT_MAX_SHIFT_DAYS),
        )


def today(tz: str = DEFAULT_TIMEZONE) -> str:
    """Current calendar date in the given timezone, as YYYY-MM-DD."""
    return format_canonical(pd.Timestamp.now(tz=tz).date())


def current_year(tz: str = DEFAULT_TIMEZONE) -> int:
    return pd.Timestamp.now(tz=tz).year
