from __future__ import annotations
from dataclasses import asdict, replace
from typing import Any, Dict, List
import logging

from flask import Flask, request, jsonify, Response

from valuation_trends.aggregation.log_ratio import AggregationMode
from valuation_trends.config.cohorts import get_cohort
from valuation_trends.config.env import get_server_config
from valuation_trends.exports.reports import coverage_warnings, stats_dict, summary_md
from valuation_trends.exports.writers import write_dataset, write_table, write_tidy
from valuation_trends.panel.overlay import overlay_label, parse_overlay_csv
from valuation_trends.panel.tidy import PanelFormatError
from valuation_trends.pipeline.recompute import (
    CohortPanel, Controls, Overlay, PipelineInputs, PipelineOutputs, default_controls, recompute,
)
from valuation_trends.series.types import AlignedDataset, YearSeries

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return get_server_config().api_key


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return jsonify({'error': 'unauthorized'}), 401
    return None


@app.before_request
def _auth():
    # Reads stay open; only computation routes are guarded
    if request.method == 'POST':
        return _check_api_key()
    return None


@app.errorhandler(ValueError)
def _bad_input(e: ValueError):
    # PanelFormatError is a ValueError too
    logger.warning("rejected request: %s", e)
    return jsonify({'error': str(e)}), 400


# -- payload -> pipeline inputs

def _payload() -> Dict[str, Any]:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    return payload


def _cast(cast, value: Any, what: str) -> Any:
    """Apply `cast`, reporting bad JSON values (null, lists, text) as ValueError."""
    if isinstance(value, (dict, list, bool)) or value is None:
        raise ValueError(f"{what} must be a number")
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a number, got {value!r}") from None


def _list_of(payload: Dict[str, Any], key: str) -> List[Any]:
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"{key} must be a list")
    return items


def _controls_from(payload: Dict[str, Any]) -> Controls:
    c = default_controls()
    raw = payload.get('controls') or {}
    if not isinstance(raw, dict):
        raise ValueError("controls must be an object")
    updates: Dict[str, Any] = {}
    if 'year_range' in raw:
        yr = raw['year_range']
        if not isinstance(yr, (list, tuple)) or len(yr) != 2:
            raise ValueError("year_range must be [start, end]")
        updates['year_range'] = (_cast(int, yr[0], 'year_range'), _cast(int, yr[1], 'year_range'))
    for key, cast in (('smoothing_window', int), ('growth_rate', float), ('scenario_end_year', int)):
        if key in raw:
            updates[key] = _cast(cast, raw[key], key)
    if 'scenario_cohort' in raw:
        updates['scenario_cohort'] = str(raw['scenario_cohort'])
    if 'aggregation_mode' in raw:
        updates['aggregation_mode'] = AggregationMode.parse(raw['aggregation_mode'])
    return replace(c, **updates)


def _cohorts_from(payload: Dict[str, Any]) -> List[CohortPanel]:
    out: List[CohortPanel] = []
    for item in _list_of(payload, 'cohorts'):
        if not isinstance(item, dict):
            raise ValueError("cohorts must be a list of objects")
        name = str(item.get('name') or '').strip()
        if not name:
            raise ValueError("every cohort needs a name")
        seed = get_cohort(name)
        years = item.get('years') or (seed.years if seed else None)
        if not years:
            raise ValueError(f"cohort '{name}' needs target years")
        if not isinstance(years, (list, tuple)):
            raise ValueError(f"cohort '{name}' years must be a list")
        rows = item.get('rows') or []
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise PanelFormatError(f"cohort '{name}' rows must be a list of objects")
        header = item.get('header')
        if header is not None and not isinstance(header, list):
            raise PanelFormatError(f"cohort '{name}' header must be a list")
        label = item.get('label') or (seed.label if seed else None)
        out.append(CohortPanel(
            name=name,
            label=None if label is None else str(label),
            rows=rows,
            years=[_cast(int, y, f"cohort '{name}' year") for y in years],
            header=header,
        ))
    return out


def _overlays_from(payload: Dict[str, Any]) -> List[Overlay]:
    out: List[Overlay] = []
    for idx, item in enumerate(_list_of(payload, 'overlays'), start=1):
        if not isinstance(item, dict):
            raise ValueError("overlays must be a list of {label, csv} objects")
        text = item.get('csv') or ''
        if not isinstance(text, str):
            raise ValueError("overlay csv must be text")
        points = parse_overlay_csv(text)
        if not points:
            continue
        label = item.get('label')
        out.append(Overlay(label=overlay_label(None if label is None else str(label), idx), points=points))
    return out


def _run(payload: Dict[str, Any]) -> PipelineOutputs:
    return recompute(PipelineInputs(
        cohorts=_cohorts_from(payload),
        controls=_controls_from(payload),
        overlays=_overlays_from(payload),
    ))


# -- pipeline outputs -> JSON

def _series_json(s: YearSeries) -> Dict[str, Any]:
    return {'years': list(s.years), 'values': list(s.values)}


def _dataset_json(d: AlignedDataset) -> Dict[str, Any]:
    return {'years': list(d.years), 'series': {k: list(v) for k, v in d.series.items()}}


def outputs_json(o: PipelineOutputs) -> Dict[str, Any]:
    controls = asdict(o.controls)
    controls['aggregation_mode'] = o.controls.aggregation_mode.value
    controls['year_range'] = list(o.controls.year_range)
    return {
        'controls': controls,
        'labels': o.labels,
        'aggregated': {k: _series_json(v) for k, v in o.aggregated.items()},
        'raw': _dataset_json(o.raw),
        'smoothed': _dataset_json(o.smoothed),
        'scenario': _series_json(o.scenario),
        'chart': _dataset_json(o.chart),
        'table': o.table,
        'stats': stats_dict(o),
        'events': o.events,
        'warnings': coverage_warnings(o),
    }


@app.get('/health')
def health():
    return jsonify({'status': 'ok'})


@app.post('/recompute')
def post_recompute():
    payload = _payload()
    if not payload.get('cohorts'):
        return jsonify({'error': 'cohorts is required'}), 400
    return jsonify(outputs_json(_run(payload)))


ARTIFACTS = {
    'chart.csv': 'text/csv',
    'table.csv': 'text/csv',
    'tidy.csv': 'text/csv',
    'summary.md': 'text/markdown',
}


@app.post('/recompute/artifacts/<name>')
def post_artifact(name: str):
    if name not in ARTIFACTS:
        return jsonify({'error': 'artifact_not_found'}), 404
    payload = _payload()
    if not payload.get('cohorts'):
        return jsonify({'error': 'cohorts is required'}), 400
    o = _run(payload)
    if name == 'chart.csv':
        body = write_dataset(o.chart)
    elif name == 'table.csv':
        body = write_table(o.table, o.raw.names)
    elif name == 'tidy.csv':
        body = write_tidy(rec for recs in o.tidy.values() for rec in recs)
    else:
        body = summary_md(o, warnings=coverage_warnings(o))
    return Response(body, mimetype=ARTIFACTS[name])


@app.post('/overlays/parse')
def post_overlay():
    text = request.get_data(as_text=True) or ''
    points = parse_overlay_csv(text)
    return jsonify({
        'label': overlay_label(request.args.get('label'), 1),
        'points': [asdict(p) for p in points],
    })


if __name__ == '__main__':
    cfg = get_server_config()
    logging.basicConfig(level=cfg.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    app.run(host='0.0.0.0', port=cfg.port)
