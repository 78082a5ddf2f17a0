from __future__ import annotations
from dataclasses import asdict
from typing import List, Dict, Any, Iterable, Sequence
import csv
import io

from valuation_trends.panel.tidy import TidyRecord
from valuation_trends.presentation.adapter import to_multiple
from valuation_trends.series.types import AlignedDataset

TIDY_COLUMNS = ["company", "year", "market_cap", "revenue", "val_rev"]


def write_csv(rows: Iterable[Dict[str, Any]], columns: List[str]) -> str:
    buf = io.StringIO()
    w = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore")
    w.writeheader()
    for r in rows:
        w.writerow({k: r.get(k) for k in columns})
    return buf.getvalue()


def write_tidy(records: Iterable[TidyRecord]) -> str:
    return write_csv((asdict(r) for r in records), TIDY_COLUMNS)


def write_dataset(dataset: AlignedDataset, as_multiple: bool = False) -> str:
    """One row per year, one column per series; gaps are left blank."""
    rows = []
    for row in dataset.rows():
        if as_multiple:
            row = {k: (v if k == "year" else to_multiple(v)) for k, v in row.items()}
        rows.append(row)
    return write_csv(rows, ["year", *dataset.names])


def write_table(rows: Iterable[Dict[str, Any]], names: Sequence[str]) -> str:
    return write_csv(rows, ["year", *names])
