from __future__ import annotations
from typing import List
import math

from valuation_trends.forecasting.assumptions import ScenarioInputs, validate_scenario
from valuation_trends.series.types import YearSeries


def horizon_years(last_year: int, end_year: int) -> List[int]:
    """Contiguous years after `last_year` up to and including `end_year`."""
    return list(range(last_year + 1, end_year + 1))


def project_log_growth(last_log: float, growth_rate: float, periods: int) -> List[float]:
    """Compound a log-scale multiple forward.

    Each step: multiple_t = multiple_{t-1} * (1 + r), reported as ln(multiple_t).
    """
    current = math.exp(last_log)
    out: List[float] = []
    for _ in range(periods):
        current *= 1.0 + growth_rate
        out.append(math.log(current))
    return out


def project_scenario(series: YearSeries, scenario: ScenarioInputs) -> YearSeries:
    """Extend a cohort's last observed log multiple out to the scenario end year.

    A series with no observation yields an empty scenario.
    """
    validate_scenario(scenario)
    last = series.last_observation()
    if last is None:
        return YearSeries.empty()
    last_year, last_log = last
    validate_scenario(scenario, last_year)
    years = horizon_years(last_year, scenario.end_year)
    return YearSeries(tuple(years), tuple(project_log_growth(last_log, scenario.growth_rate, len(years))))
