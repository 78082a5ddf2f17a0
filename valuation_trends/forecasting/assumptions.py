from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

MAX_END_YEAR = 2100
MAX_HORIZON_YEARS = 50


@dataclass(frozen=True)
class ScenarioInputs:
    growth_rate: float  # annual compound growth of the P/S multiple (e.g., 0.18 for 18%)
    end_year: int = 2032  # last projected year, inclusive


def validate_scenario(s: ScenarioInputs, last_year: Optional[int] = None) -> None:
    if s.growth_rate <= -1.0:
        raise ValueError("growth rate must be above -100% so the multiple stays positive")
    if not (-0.9 <= s.growth_rate <= 1.0):
        raise ValueError("growth rate must be between -90% and 100% per year")
    if s.end_year > MAX_END_YEAR:
        raise ValueError(f"scenario end year must be {MAX_END_YEAR} or earlier")
    if last_year is not None and s.end_year - last_year > MAX_HORIZON_YEARS:
        raise ValueError(f"scenario may project at most {MAX_HORIZON_YEARS} years past {last_year}")
