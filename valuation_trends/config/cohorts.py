from dataclasses import dataclass
from typing import Optional, Tuple


# Seed cohorts; panels for each are supplied by the caller.
@dataclass(frozen=True)
class CohortSpec:
    name: str
    label: str
    years: Tuple[int, ...]
    source_hint: Optional[str] = None


COHORTS: Tuple[CohortSpec, ...] = (
    CohortSpec(name="dotcom", label="Dot-com", years=(1996, 1997, 1998, 1999, 2000),
               source_hint="Company-Metric-1996-1997-1998-1999-2000.csv"),
    CohortSpec(name="big_tech_ai", label="Big Tech AI", years=(2020, 2021, 2022, 2023, 2024, 2025),
               source_hint="spreadsheet (4).xlsx"),
    CohortSpec(name="pure_play_ai", label="Pure-play AI", years=(2020, 2021, 2022, 2023, 2024, 2025),
               source_hint="spreadsheet (3).xlsx"),
)

SCENARIO_COHORT = "big_tech_ai"


def get_cohort(name: str) -> Optional[CohortSpec]:
    for c in COHORTS:
        if c.name == name:
            return c
    return None
