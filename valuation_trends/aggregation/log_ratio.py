from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable, List
import logging
import math
import statistics

from valuation_trends.panel.tidy import TidyRecord
from valuation_trends.series.types import YearSeries

logger = logging.getLogger(__name__)


class AggregationMode(str, Enum):
    MEAN = "mean"      # ln(mean(P/S)): the average multiple
    MEDIAN = "median"  # median(ln(P/S)): the typical log-multiple

    @classmethod
    def parse(cls, value: "str | AggregationMode") -> "AggregationMode":
        if isinstance(value, AggregationMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown aggregation mode: {value!r}") from None


def valid_ratios_by_year(records: Iterable[TidyRecord]) -> Dict[int, List[float]]:
    """Group val/rev ratios by year; None and non-positive ratios have no log and are dropped."""
    by_year: Dict[int, List[float]] = {}
    for r in records:
        if r.val_rev is not None and r.val_rev > 0:
            by_year.setdefault(r.year, []).append(r.val_rev)
    return by_year


def aggregate_log_ratio(
    records: Iterable[TidyRecord], mode: AggregationMode = AggregationMode.MEAN
) -> YearSeries:
    """Reduce tidy records to one log-scale ratio per year.

    MEAN takes the log of the arithmetic mean (not the mean of logs).
    MEDIAN logs every ratio first, then takes the sample median.
    Years without a valid ratio are omitted.
    """
    mode = AggregationMode.parse(mode)
    by_year = valid_ratios_by_year(records)
    years = sorted(by_year)
    if mode is AggregationMode.MEAN:
        values = [math.log(sum(by_year[y]) / len(by_year[y])) for y in years]
    else:
        values = [statistics.median(math.log(v) for v in by_year[y]) for y in years]
    logger.debug("aggregated %d years (%s)", len(years), mode.value)
    return YearSeries(tuple(years), tuple(values))
