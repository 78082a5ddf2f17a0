from __future__ import annotations
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from valuation_trends.series.types import AlignedDataset, YearSeries


def union_years(*series: YearSeries) -> Tuple[int, ...]:
    years: set[int] = set()
    for s in series:
        years.update(s.years)
    return tuple(sorted(years))


def align_to(series: YearSeries, years: Iterable[int]) -> Tuple[Optional[float], ...]:
    lookup = series.as_dict()
    return tuple(lookup.get(y) for y in years)


def align_series(
    named: Mapping[str, YearSeries], years: Optional[Sequence[int]] = None
) -> AlignedDataset:
    """Place every series on one shared year axis.

    - Axis is the sorted union of all input years unless `years` is given
    - Observed values are carried through unchanged; missing years become None
    - Nothing is interpolated, so each (year, value) pair survives alignment
    """
    axis = tuple(sorted(set(years))) if years is not None else union_years(*named.values())
    return AlignedDataset(
        years=axis,
        series={name: align_to(s, axis) for name, s in named.items()},
    )
