from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import logging

from valuation_trends.aggregation.log_ratio import AggregationMode, aggregate_log_ratio
from valuation_trends.config.cohorts import SCENARIO_COHORT
from valuation_trends.config.env import PipelineConfig, get_pipeline_config
from valuation_trends.forecasting.assumptions import ScenarioInputs, validate_scenario
from valuation_trends.forecasting.engine import project_scenario
from valuation_trends.panel.overlay import OverlayPoint, overlay_series
from valuation_trends.panel.tidy import TidyRecord, tidy_panel
from valuation_trends.presentation.adapter import CohortChange, cohort_change, table_rows
from valuation_trends.series.align import align_series
from valuation_trends.series.smoothing import smooth_dataset
from valuation_trends.series.types import AlignedDataset, YearSeries

logger = logging.getLogger(__name__)

SCENARIO = "scenario"


@dataclass(frozen=True)
class CohortPanel:
    name: str
    rows: Sequence[Mapping[str, Any]]
    years: Sequence[int]
    label: Optional[str] = None
    header: Optional[Sequence[Any]] = None


@dataclass(frozen=True)
class Overlay:
    label: str
    points: Sequence[OverlayPoint]


@dataclass(frozen=True)
class Controls:
    year_range: Tuple[int, int] = (1996, 2025)
    smoothing_window: int = 2
    growth_rate: float = 0.18
    aggregation_mode: AggregationMode = AggregationMode.MEAN
    scenario_cohort: str = SCENARIO_COHORT
    scenario_end_year: int = 2032
    smoothing_digits: Optional[int] = 4


def default_controls(cfg: PipelineConfig | None = None) -> Controls:
    cfg = cfg or get_pipeline_config()
    return Controls(
        year_range=(cfg.year_start, cfg.year_end),
        smoothing_window=cfg.smoothing_window,
        growth_rate=cfg.growth_rate,
        aggregation_mode=AggregationMode.parse(cfg.aggregation),
        scenario_end_year=cfg.scenario_end_year,
        smoothing_digits=cfg.smoothing_digits,
    )


def validate_controls(c: Controls) -> Controls:
    """Check controls and return them with the aggregation mode normalized."""
    if c.smoothing_window < 1:
        raise ValueError("smoothing window must be at least 1")
    start, end = c.year_range
    if start > end:
        raise ValueError("year range start must not be after its end")
    validate_scenario(ScenarioInputs(growth_rate=c.growth_rate, end_year=c.scenario_end_year))
    return replace(c, aggregation_mode=AggregationMode.parse(c.aggregation_mode))


@dataclass(frozen=True)
class PipelineInputs:
    cohorts: Sequence[CohortPanel]
    controls: Controls = field(default_factory=Controls)
    overlays: Sequence[Overlay] = ()


@dataclass(frozen=True)
class PipelineOutputs:
    tidy: Dict[str, List[TidyRecord]]
    aggregated: Dict[str, YearSeries]
    raw: AlignedDataset
    smoothed: AlignedDataset
    scenario: YearSeries
    chart: AlignedDataset
    table: List[Dict[str, object]]
    stats: Dict[str, Optional[CohortChange]]
    labels: Dict[str, str]
    controls: Controls
    events: List[Dict[str, str]] = field(default_factory=list)


def _event(events: List[Dict[str, str]], stage: str, message: str):
    events.append({"stage": stage, "message": message})
    logger.info("[%s] %s", stage, message)


def _unique_key(name: str, taken: Mapping[str, Any]) -> str:
    """`name`, or `name (2)`, `name (3)`, ... if already used in `taken`."""
    if name not in taken:
        return name
    n = 2
    while f"{name} ({n})" in taken:
        n += 1
    return f"{name} ({n})"


def _check_cohort_names(cohorts: Sequence[CohortPanel]) -> None:
    seen: set[str] = set()
    for c in cohorts:
        if c.name in seen:
            raise ValueError(f"duplicate cohort name: {c.name!r}")
        seen.add(c.name)


def recompute(inputs: PipelineInputs) -> PipelineOutputs:
    """Run every stage from scratch for the current panels and controls.

    Tidy -> Aggregate -> Align -> Smooth -> Scenario -> Present. Holds no state
    between calls, so any change of input is handled by calling it again.
    """
    controls = validate_controls(inputs.controls)
    _check_cohort_names(inputs.cohorts)
    events: List[Dict[str, str]] = []
    labels = {c.name: c.label or c.name for c in inputs.cohorts}

    _event(events, "Tidy", f"Reshaping {len(inputs.cohorts)} cohort panel(s)")
    tidy = {c.name: tidy_panel(c.rows, c.years, header=c.header) for c in inputs.cohorts}

    _event(events, "Aggregate", f"Per-year log P/S ({controls.aggregation_mode.value})")
    aggregated = {name: aggregate_log_ratio(recs, controls.aggregation_mode) for name, recs in tidy.items()}
    for name, s in aggregated.items():
        if not len(s):
            logger.warning("cohort '%s' has no valid P/S observations", name)

    _event(events, "Align", "Aligning cohorts on a shared year axis")
    raw = align_series(aggregated)

    _event(events, "Smooth", f"Moving average over {controls.smoothing_window} point(s)")
    smoothed = smooth_dataset(raw, controls.smoothing_window, controls.smoothing_digits)

    _event(events, "Scenario", f"{controls.scenario_cohort} at {controls.growth_rate:.0%} CAGR to {controls.scenario_end_year}")
    if controls.scenario_cohort in raw.series:
        scenario = project_scenario(
            raw.column(controls.scenario_cohort),
            ScenarioInputs(growth_rate=controls.growth_rate, end_year=controls.scenario_end_year),
        )
    else:
        scenario = YearSeries.empty()

    _event(events, "Present", "Building chart, table and change stats")
    axis = sorted(set(raw.years) | set(scenario.years))
    chart_series: Dict[str, YearSeries] = {name: smoothed.column(name) for name in smoothed.names}
    # Cohorts keep their names; scenario and overlays never overwrite a line
    scenario_key = _unique_key(SCENARIO, chart_series)
    chart_series[scenario_key] = scenario
    labels[scenario_key] = f"{labels.get(controls.scenario_cohort, controls.scenario_cohort)} {controls.growth_rate:.0%} CAGR scenario"
    for ov in inputs.overlays:
        key = _unique_key(ov.label, chart_series)
        chart_series[key] = overlay_series(list(ov.points))
        labels[key] = ov.label
    chart = align_series(chart_series, years=axis)

    table = table_rows(raw, controls.year_range)
    stats = {name: cohort_change(raw, name, controls.year_range) for name in raw.names}

    _event(events, "Done", f"{len(raw.years)} historical year(s), {len(scenario)} projected")
    return PipelineOutputs(
        tidy=tidy,
        aggregated=aggregated,
        raw=raw,
        smoothed=smoothed,
        scenario=scenario,
        chart=chart,
        table=table,
        stats=stats,
        labels=labels,
        controls=controls,
        events=events,
    )
