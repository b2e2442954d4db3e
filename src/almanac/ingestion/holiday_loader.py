"""Holiday set loaders for tabular and text sources.

Holiday files carry no declared schema: a spreadsheet may hold serial
numbers, date strings and free-text descriptions in any column, and a CSV
line may put its date in any position. Both loaders discover the dates
with the DateNormalizer cascade and return:

    (holidays, diagnostics)

where holidays is a sorted, deduplicated tuple of YYYY-MM-DD strings.

Loaders never raise on messy data; unparseable cells are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from almanac.calendar.date_normalizer import normalize
from almanac.ingestion.diagnostics import MAX_SAMPLES, LoadDiagnostics, LoadSample

logger = logging.getLogger(__name__)

RawTable = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class ColumnChoice:
    """Column picked as date-bearing, and how many of its cells parsed."""
    index: int
    count: int


def _cell(row: Sequence[Any], col: int) -> Any:
    return row[col] if col < len(row) else None


def select_date_column(table: RawTable) -> ColumnChoice:
    """Pick the column with the most parseable dates.

    Ties go to the lowest column index. An empty table (no rows, or only
    zero-width rows) yields ColumnChoice(0, 0).
    """
    width = max((len(row) for row in table), default=0)

    best = ColumnChoice(index=0, count=0)
    for col in range(width):
        count = sum(1 for row in table if normalize(_cell(row, col)) is not None)
        if count > best.count:
            best = ColumnChoice(index=col, count=count)
    return best


def load_from_table(
    table: RawTable,
    file_path: Optional[str] = None,
    sheet_name: Optional[str] = None,
) -> tuple[tuple[str, ...], LoadDiagnostics]:
    """Load holidays from a raw table (rows of untyped cells)."""
    choice = select_date_column(table)

    holidays: set[str] = set()
    samples: list[LoadSample] = []
    for idx, row in enumerate(table):
        raw = _cell(row, choice.index)
        out = normalize(raw)
        if out is None:
            continue
        holidays.add(out)
        if len(samples) < MAX_SAMPLES:
            samples.append(LoadSample(index=idx + 1, raw=raw, out=out))

    result = tuple(sorted(holidays))
    logger.debug(
        f"Table load: {len(table)} rows, column {choice.index} "
        f"({choice.count} dates), {len(result)} unique holidays"
    )
    return result, LoadDiagnostics(
        source="table",
        file_path=file_path,
        sheet_name=sheet_name,
        row_count=len(table),
        best_col=choice.index,
        best_count=choice.count,
        count=len(result),
        samples=tuple(samples),
    )


def _first_date_token(line: str) -> Optional[str]:
    for token in (t.strip() for t in line.split(",")):
        if not token:
            continue
        out = normalize(token)
        if out is not None:
            return out
    return None


def load_from_lines(
    lines: Sequence[str],
    file_path: Optional[str] = None,
) -> tuple[tuple[str, ...], LoadDiagnostics]:
    """Load holidays from text lines; each line contributes its first date token."""
    kept = [line.strip() for line in lines if line and line.strip()]

    holidays: set[str] = set()
    samples: list[LoadSample] = []
    for idx, line in enumerate(kept):
        out = _first_date_token(line)
        if out is None:
            continue
        holidays.add(out)
        if len(samples) < MAX_SAMPLES:
            samples.append(LoadSample(index=idx + 1, raw=line, out=out))

    result = tuple(sorted(holidays))
    logger.debug(f"Text load: {len(kept)} lines, {len(result)} unique holidays")
    return result, LoadDiagnostics(
        source="text",
        file_path=file_path,
        row_count=len(kept),
        count=len(result),
        samples=tuple(samples),
    )
