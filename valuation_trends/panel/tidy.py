from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging
import math

logger = logging.getLogger(__name__)

BLOCK_WIDTH = 3  # Market Cap, Revenue, Valuation/Revenue

COMPANY_FRAGMENT = "company"
METRIC_FRAGMENT = "metric"

MARKET_CAP = "market cap"
REVENUE = "revenue"
VAL_REV = "valuation/revenue"


class PanelFormatError(ValueError):
    """Raised when a panel lacks the structure needed to find company blocks."""


@dataclass(frozen=True)
class TidyRecord:
    company: str
    year: int
    market_cap: Optional[float] = None
    revenue: Optional[float] = None
    val_rev: Optional[float] = None


def parse_cell(value: Any) -> Optional[float]:
    """Parse a panel cell into a float, or None when it holds no usable number.

    Accepts quoted text, thousands separators and 'n/a'. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
        return out if math.isfinite(out) else None
    text = str(value).strip().strip('"').strip("'").strip()
    if not text or text.lower() == "n/a":
        return None
    try:
        out = float(text.replace(",", ""))
    except ValueError:
        return None
    return out if math.isfinite(out) else None


def _label_year(label: Any) -> Optional[int]:
    num = parse_cell(label)
    if num is None or not num.is_integer():
        return None
    return int(num)


def resolve_year_columns(header: Sequence[Any], years: Iterable[int]) -> Dict[int, Any]:
    """Map each target year to its header label; unknown years are left out."""
    by_year: Dict[int, Any] = {}
    for label in header:
        y = _label_year(label)
        if y is not None and y not in by_year:
            by_year[y] = label
    return {int(y): by_year[int(y)] for y in years if int(y) in by_year}


def find_column(header: Sequence[Any], fragment: str) -> Optional[Any]:
    frag = fragment.lower()
    for label in header:
        if frag in str(label).lower():
            return label
    return None


def _text(row: Mapping[str, Any], column: Optional[Any]) -> str:
    if column is None:
        return ""
    cell = row.get(column)
    return "" if cell is None else str(cell).strip()


def segment_blocks(companies: Sequence[str], width: int = BLOCK_WIDTH) -> List[slice]:
    """Split row indices into company blocks.

    A block starts at the first row with a non-empty company at or after the
    end of the previous block and spans `width` rows, clipped to the table.
    Blank rows in between are skipped one by one.
    """
    n = len(companies)
    blocks: List[slice] = []
    start = 0
    while start < n:
        anchor = next((i for i in range(start, n) if companies[i]), None)
        if anchor is None:
            break
        blocks.append(slice(anchor, min(anchor + width, n)))
        start = anchor + width
    return blocks


def _metric_kind(label: str) -> Optional[str]:
    low = label.lower()
    if VAL_REV in low:
        return VAL_REV
    if MARKET_CAP in low:
        return MARKET_CAP
    if REVENUE in low and "valuation" not in low:
        return REVENUE
    return None


def _pick_metric_rows(
    block: Sequence[Mapping[str, Any]], metric_col: Optional[Any]
) -> Dict[str, Mapping[str, Any]]:
    if metric_col is None:
        # No metric labels: rely on the fixed block order
        kinds = (MARKET_CAP, REVENUE, VAL_REV)
        return {kind: row for kind, row in zip(kinds, block)}
    picked: Dict[str, Mapping[str, Any]] = {}
    for row in block:
        kind = _metric_kind(_text(row, metric_col))
        if kind is not None and kind not in picked:
            picked[kind] = row
    return picked


def tidy_panel(
    rows: Sequence[Mapping[str, Any]],
    years: Iterable[int],
    header: Optional[Sequence[Any]] = None,
) -> List[TidyRecord]:
    """Reshape a wide company/metric panel into one record per (company, year).

    - Header defaults to the first row's keys; year columns are resolved once
    - Each block is three rows: Market Cap, Revenue, Valuation/Revenue
    - A missing metric row leaves that field None for every year
    - Output is grouped by block order, then ascending year
    """
    if not rows:
        return []
    cols = list(header) if header is not None else list(rows[0].keys())
    company_col = find_column(cols, COMPANY_FRAGMENT)
    if company_col is None:
        raise PanelFormatError("panel header has no company column")
    metric_col = find_column(cols, METRIC_FRAGMENT)

    targets = sorted(set(int(y) for y in years))
    year_cols = resolve_year_columns(cols, targets)
    missing = [y for y in targets if y not in year_cols]
    if missing:
        logger.warning("years not found in panel header: %s", missing)

    companies = [_text(r, company_col) for r in rows]
    records: List[TidyRecord] = []
    for span in segment_blocks(companies):
        block = rows[span]
        company = companies[span.start]
        metrics = _pick_metric_rows(block, metric_col)
        absent = [k for k in (MARKET_CAP, REVENUE, VAL_REV) if k not in metrics]
        if absent:
            logger.warning("company '%s' is missing metric rows: %s", company, absent)

        def cell(kind: str, label: Any) -> Optional[float]:
            row = metrics.get(kind)
            return parse_cell(row.get(label)) if row is not None else None

        for year, label in sorted(year_cols.items()):
            records.append(
                TidyRecord(
                    company=company,
                    year=year,
                    market_cap=cell(MARKET_CAP, label),
                    revenue=cell(REVENUE, label),
                    val_rev=cell(VAL_REV, label),
                )
            )
    logger.debug("tidied %d records from %d rows", len(records), len(rows))
    return records
