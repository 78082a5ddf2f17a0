from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import math

from valuation_trends.series.types import AlignedDataset

GAP = "–"


def to_multiple(log_value: Optional[float]) -> Optional[float]:
    return None if log_value is None else math.exp(log_value)


def format_multiple(log_value: Optional[float], digits: int = 1) -> str:
    m = to_multiple(log_value)
    return GAP if m is None else f"{m:.{digits}f}×"


def indices_in_range(years: Sequence[int], start: int, end: int) -> List[Tuple[int, int]]:
    return [(y, idx) for idx, y in enumerate(years) if start <= y <= end]


def table_rows(dataset: AlignedDataset, year_range: Tuple[int, int]) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    for year, idx in indices_in_range(dataset.years, *year_range):
        row: Dict[str, object] = {"year": year}
        for name, vals in dataset.series.items():
            row[name] = format_multiple(vals[idx])
        rows.append(row)
    return rows


@dataclass(frozen=True)
class CohortChange:
    cohort: str
    start_year: int
    end_year: int
    start_multiple: float
    end_multiple: float
    change: float      # end - start, in multiple points
    cagr_pct: float    # compound annual change of the multiple


def cohort_change(
    dataset: AlignedDataset, name: str, year_range: Tuple[int, int]
) -> Optional[CohortChange]:
    """P/S change and CAGR between the first and last visible years.

    Returns None when the range is empty or either endpoint is a gap.
    """
    visible = indices_in_range(dataset.years, *year_range)
    if not visible or name not in dataset.series:
        return None
    (first_year, first_idx), (last_year, last_idx) = visible[0], visible[-1]
    vals = dataset.series[name]
    if vals[first_idx] is None or vals[last_idx] is None:
        return None
    start, end = math.exp(vals[first_idx]), math.exp(vals[last_idx])
    periods = max(1, len(visible) - 1)
    return CohortChange(
        cohort=name,
        start_year=first_year,
        end_year=last_year,
        start_multiple=start,
        end_multiple=end,
        change=end - start,
        cagr_pct=((end / start) ** (1.0 / periods) - 1.0) * 100.0,
    )
