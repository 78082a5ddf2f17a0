from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import csv
import io
import math

from valuation_trends.panel.tidy import parse_cell
from valuation_trends.series.types import YearSeries

"""
User-supplied overlay series: a small CSV with a year column and a
value/index column. Values are read as P/S multiples and logged so they
share the scale of the cohort lines.
"""


@dataclass(frozen=True)
class OverlayPoint:
    year: int
    value: float


def _column(headers: List[str], *fragments: str) -> Optional[int]:
    for idx, h in enumerate(headers):
        if any(f in h for f in fragments):
            return idx
    return None


def parse_overlay_csv(text: str) -> List[OverlayPoint]:
    """Parse overlay CSV text; rows without a finite year and value are dropped."""
    lines = [ln for ln in (text or "").strip().splitlines() if ln.strip()]
    if not lines:
        return []
    reader = csv.reader(io.StringIO("\n".join(lines)))
    headers = [h.strip().lower() for h in next(reader)]
    year_idx = _column(headers, "year")
    value_idx = _column(headers, "value", "index")
    if year_idx is None or value_idx is None:
        return []

    out: List[OverlayPoint] = []
    for cells in reader:
        if max(year_idx, value_idx) >= len(cells):
            continue
        year = parse_cell(cells[year_idx])
        value = parse_cell(cells[value_idx])
        if year is None or value is None or not year.is_integer():
            continue
        out.append(OverlayPoint(year=int(year), value=value))
    return out


def overlay_series(points: List[OverlayPoint]) -> YearSeries:
    """Log-scale an overlay; non-positive values have no log and are left out."""
    return YearSeries.from_pairs(
        (p.year, math.log(p.value)) for p in points if p.value > 0
    )


def overlay_label(filename: Optional[str], position: int) -> str:
    name = (filename or "").strip()
    if name.lower().endswith(".csv"):
        name = name[:-4]
    return name or f"Upload {position}"
