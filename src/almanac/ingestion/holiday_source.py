"""Holiday file discovery and reading.

Holiday files are named BSE_Holidays_<YYYY>.xlsx or BSE_Holidays_<YYYY>.csv
and live in a configured directory. Reading only materialises data:

    .xlsx -> raw table (first sheet, every cell, no header row)
    .csv  -> raw lines

Interpretation of the data is left to holiday_loader.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import pandas as pd

from almanac.config import HOLIDAY_FILE_EXTENSIONS, HOLIDAY_FILE_PREFIX

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_holiday_file(
    year: int,
    directory: PathLike = ".",
    prefix: str = HOLIDAY_FILE_PREFIX,
    extensions: Sequence[str] = HOLIDAY_FILE_EXTENSIONS,
) -> Optional[Path]:
    """Locate the holiday file for a year.

    Matching is case-insensitive on the whole file name. When several files
    match, the first by name wins. If none match the pattern, the expected
    names (one per extension, in preference order) are checked directly.

    Returns:
        Path to the file, or None if no holiday file exists for the year.
    """
    directory = Path(directory)
    ext_pattern = "|".join(re.escape(e.lstrip(".")) for e in extensions)
    pattern = re.compile(
        rf"^{re.escape(prefix)}(\d{{4}})\.({ext_pattern})$", re.IGNORECASE
    )

    candidates: list[Path] = []
    if directory.is_dir():
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            m = pattern.match(entry.name)
            if m and int(m.group(1)) == year and entry.is_file():
                candidates.append(entry)

    if candidates:
        return candidates[0]

    for ext in extensions:
        expected = directory / f"{prefix}{year}{ext}"
        if expected.is_file():
            return expected
    return None


def read_table(path: PathLike) -> tuple[list[list[Any]], str]:
    """Read the first sheet of a workbook as rows of raw cell values.

    Empty cells become None; typed dates come back as pandas Timestamps
    and numbers as Python/numpy scalars.

    Returns:
        (rows, sheet_name)
    """
    with pd.ExcelFile(path, engine="openpyxl") as workbook:
        sheet_name = workbook.sheet_names[0]
        df = workbook.parse(sheet_name, header=None)
    df = df.astype(object)
    df = df.where(pd.notna(df), None)
    rows = [list(r) for r in df.itertuples(index=False, name=None)]
    return rows, str(sheet_name)


def read_lines(path: PathLike) -> list[str]:
    """Read a text file as lines (UTF-8, BOM tolerated)."""
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read().splitlines()
