from __future__ import annotations
from typing import Any, Dict, List

from valuation_trends.pipeline.recompute import Controls, PipelineOutputs


def controls_md(controls: Controls) -> List[str]:
    start, end = controls.year_range
    return [
        f"- year_range: {start}-{end}",
        f"- smoothing_window: {controls.smoothing_window}",
        f"- aggregation_mode: {controls.aggregation_mode.value}",
        f"- growth_rate: {controls.growth_rate:.2%}",
        f"- scenario: {controls.scenario_cohort} to {controls.scenario_end_year}",
    ]


def summary_md(outputs: PipelineOutputs, warnings: List[str] | None = None) -> str:
    lines = ["# Valuation / Revenue Summary", "", "## Controls"]
    lines.extend(controls_md(outputs.controls))

    lines.append("\n## Cohorts")
    for name, series in outputs.aggregated.items():
        label = outputs.labels.get(name, name)
        companies = len({r.company for r in outputs.tidy.get(name, [])})
        span = f"{series.years[0]}-{series.years[-1]}" if len(series) else "no data"
        lines.append(f"- {label}: {companies} companies, {span}")

    lines.append("\n## P/S change over range")
    for name, st in outputs.stats.items():
        label = outputs.labels.get(name, name)
        if st is None:
            lines.append(f"- {label}: n/a")
        else:
            lines.append(
                f"- {label}: {st.start_multiple:.1f}x -> {st.end_multiple:.1f}x "
                f"({st.change:+.1f}x, CAGR {st.cagr_pct:.1f}%)"
            )

    if warnings:
        lines.append("\n## Warnings")
        for w in warnings:
            lines.append(f"- {w}")
    return "\n".join(lines) + "\n"


def coverage_warnings(outputs: PipelineOutputs) -> List[str]:
    out: List[str] = []
    for name, series in outputs.aggregated.items():
        if not len(series):
            out.append(f"{outputs.labels.get(name, name)} has no valid P/S observations")
    if not len(outputs.scenario):
        out.append("scenario could not be projected")
    return out


def stats_dict(outputs: PipelineOutputs) -> Dict[str, Any]:
    return {
        name: (None if st is None else {
            "start_year": st.start_year,
            "end_year": st.end_year,
            "start_multiple": st.start_multiple,
            "end_multiple": st.end_multiple,
            "change": st.change,
            "cagr_pct": st.cagr_pct,
        })
        for name, st in outputs.stats.items()
    }
