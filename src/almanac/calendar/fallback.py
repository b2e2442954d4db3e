"""Hardcoded BSE holiday list, used when no holiday file is usable.

The entries are kept exactly as published (mixed human formats) and go
through the same normaliser as file-sourced holidays, so a fallback set is
structurally indistinguishable from a loaded one.
"""

from __future__ import annotations

import logging

from almanac.calendar.date_normalizer import normalize
from almanac.ingestion.diagnostics import LoadDiagnostics

logger = logging.getLogger(__name__)

# BSE trading holidays by year, as published.
FALLBACK_HOLIDAYS: dict[int, tuple[str, ...]] = {
    2025: (
        "February 26,2025",   # Mahashivratri
        "14-Mar-2025",        # Holi
        "March 31,2025",      # Id-Ul-Fitr
        "April 10,2025",      # Mahavir Jayanti
        "April 14,2025",      # Dr. Baba Saheb Ambedkar Jayanti
        "April 18,2025",      # Good Friday
        "May 01,2025",        # Maharashtra Day
        "August 15,2025",     # Independence Day
        "August 27,2025",     # Ganesh Chaturthi
        "October 02,2025",    # Gandhi Jayanti / Dussehra
        "October 21,2025",    # Diwali Laxmi Pujan
        "October 22,2025",    # Diwali Balipratipada
        "November 05,2025",   # Guru Nanak Jayanti
        "December 25,2025",   # Christmas
    ),
}


def fallback_holidays(year: int) -> tuple[tuple[str, ...], LoadDiagnostics]:
    """Return the normalised fallback holiday set for a year.

    Years without a hardcoded list yield an empty set.
    """
    entries = FALLBACK_HOLIDAYS.get(year, ())
    normalized = {n for n in (normalize(e) for e in entries) if n is not None}
    holidays = tuple(sorted(normalized))

    if not holidays:
        logger.warning(f"No fallback holidays known for {year}")

    return holidays, LoadDiagnostics(source="fallback", count=len(holidays))
