from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class YearSeries:
    years: Tuple[int, ...] = ()
    values: Tuple[Optional[float], ...] = ()

    def __post_init__(self):
        years = tuple(int(y) for y in self.years)
        values = tuple(self.values)
        if len(years) != len(values):
            raise ValueError("years and values must have the same length")
        if any(b <= a for a, b in zip(years, years[1:])):
            raise ValueError("years must be strictly increasing")
        object.__setattr__(self, "years", years)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.years)

    @staticmethod
    def empty() -> "YearSeries":
        return YearSeries()

    @staticmethod
    def from_pairs(pairs: Iterable[Tuple[int, Optional[float]]]) -> "YearSeries":
        """Build from (year, value) pairs in any order; later duplicates win."""
        by_year: Dict[int, Optional[float]] = {}
        for year, value in pairs:
            by_year[int(year)] = value
        years = sorted(by_year)
        return YearSeries(tuple(years), tuple(by_year[y] for y in years))

    def as_dict(self) -> Dict[int, Optional[float]]:
        return dict(zip(self.years, self.values))

    def last_observation(self) -> Optional[Tuple[int, float]]:
        """Latest (year, value) whose value is not a gap."""
        for year, value in zip(reversed(self.years), reversed(self.values)):
            if value is not None:
                return year, value
        return None


@dataclass(frozen=True)
class AlignedDataset:
    years: Tuple[int, ...] = ()
    series: Dict[str, Tuple[Optional[float], ...]] = field(default_factory=dict)

    def __post_init__(self):
        years = tuple(int(y) for y in self.years)
        series = {name: tuple(vals) for name, vals in self.series.items()}
        for name, vals in series.items():
            if len(vals) != len(years):
                raise ValueError(f"series '{name}' is not aligned to the year axis")
        object.__setattr__(self, "years", years)
        object.__setattr__(self, "series", series)

    @property
    def names(self) -> List[str]:
        return list(self.series.keys())

    def column(self, name: str) -> YearSeries:
        return YearSeries(self.years, self.series[name])

    def value_at(self, name: str, year: int) -> Optional[float]:
        try:
            idx = self.years.index(year)
        except ValueError:
            return None
        return self.series[name][idx]

    def rows(self) -> List[Dict[str, object]]:
        out: List[Dict[str, object]] = []
        for idx, year in enumerate(self.years):
            row: Dict[str, object] = {"year": year}
            for name, vals in self.series.items():
                row[name] = vals[idx]
            out.append(row)
        return out
