from __future__ import annotations
from typing import List, Optional, Sequence

from valuation_trends.series.types import AlignedDataset


def moving_average(
    values: Sequence[Optional[float]], window: int, ndigits: Optional[int] = None
) -> List[Optional[float]]:
    """Centered moving average over a sequence that may contain gaps (None).

    Window for position i is [max(0, i - w//2), min(n, i + ceil(w/2))), clipped
    at both ends. Only non-null values are averaged. A gap stays a gap.
    """
    if window <= 1:
        return list(values)
    n = len(values)
    back = window // 2
    ahead = window - back  # ceil(window / 2)
    out: List[Optional[float]] = []
    for i, val in enumerate(values):
        if val is None:
            out.append(None)
            continue
        present = [v for v in values[max(0, i - back):min(n, i + ahead)] if v is not None]
        if not present:
            out.append(None)
            continue
        avg = sum(present) / len(present)
        out.append(round(avg, ndigits) if ndigits is not None else avg)
    return out


def smooth_dataset(
    dataset: AlignedDataset, window: int, ndigits: Optional[int] = None
) -> AlignedDataset:
    return AlignedDataset(
        years=dataset.years,
        series={name: tuple(moving_average(vals, window, ndigits)) for name, vals in dataset.series.items()},
    )
