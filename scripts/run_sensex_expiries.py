"""Sensex expiry calendar — command-line runner.

Loads the holiday set for the current year (file or fallback) and prints
JSON for one of:

    holidays                      current holiday set
    debug                         diagnostics of the last load
    reload                        refresh and print holidays + diagnostics
    expiries [--start-date D] [--months-ahead N]
                                  holiday-adjusted Thursday expiries

Configuration comes from ALMANAC_* environment variables; --holiday-dir
overrides ALMANAC_HOLIDAY_DIR.
"""

import argparse
import dataclasses
import json
import logging
import sys

from almanac.config import CalendarConfig
from almanac.service.holiday_cache import HolidayCache

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger("sensex_runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sensex weekly expiry calendar")
    parser.add_argument("--holiday-dir", help="Directory holding BSE_Holidays_<year> files")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("holidays", help="Print the current holiday set")
    sub.add_parser("debug", help="Print diagnostics of the last holiday load")
    sub.add_parser("reload", help="Reload holidays and print the result")
    exp = sub.add_parser("expiries", help="Print adjusted expiry dates")
    exp.add_argument("--start-date", help="YYYY-MM-DD (default: today in exchange time)")
    exp.add_argument("--months-ahead", type=int, help="Months to generate (default: 3)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = CalendarConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    if args.holiday_dir:
        config = dataclasses.replace(config, holiday_dir=args.holiday_dir)

    cache = HolidayCache(config)
    snapshot = cache.refresh()

    if args.command == "holidays":
        payload = {"holidays": list(cache.holidays)}
    elif args.command == "debug":
        payload = {"diagnostics": cache.diagnostics.to_dict()}
    elif args.command == "reload":
        payload = {
            "status": "reloaded",
            "holidays": list(snapshot.holidays),
            "diagnostics": snapshot.diagnostics.to_dict(),
        }
    else:
        try:
            expiries = cache.expiries(args.start_date, args.months_ahead)
        except ValueError as e:
            logger.error(f"Failed to generate Sensex expiries: {e}")
            return 2
        payload = {"expiries": list(expiries), "holidays": list(cache.holidays)}

    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
