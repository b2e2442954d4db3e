"""Load diagnostics — how the current holiday set was produced.

A fresh record is created by every load; nothing accumulates across loads.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

MAX_SAMPLES = 8


@dataclass(frozen=True)
class LoadSample:
    """One (raw value -> normalised value) pair, index is 1-based."""
    index: int
    raw: Any
    out: str


@dataclass(frozen=True)
class LoadDiagnostics:
    """Provenance of a holiday set.

    source is "table", "text" or "fallback". best_col is set only when a
    column was chosen heuristically.
    """
    source: str
    file_path: Optional[str] = None
    sheet_name: Optional[str] = None
    row_count: int = 0
    best_col: Optional[int] = None
    best_count: int = 0
    count: int = 0
    samples: tuple[LoadSample, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view; raw sample values are stringified."""
        d = asdict(self)
        d["samples"] = [
            {"index": s.index, "raw": str(s.raw), "out": s.out}
            for s in self.samples
        ]
        return d
