from __future__ import annotations
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    year_start: int = 1996
    year_end: int = 2025
    smoothing_window: int = 2
    growth_rate: float = 0.18
    scenario_end_year: int = 2032
    aggregation: str = "mean"
    smoothing_digits: int = 4


def get_pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        year_start=int(os.getenv("VT_YEAR_START", "1996")),
        year_end=int(os.getenv("VT_YEAR_END", "2025")),
        smoothing_window=int(os.getenv("VT_SMOOTHING_WINDOW", "2")),
        growth_rate=float(os.getenv("VT_GROWTH_RATE", "0.18")),
        scenario_end_year=int(os.getenv("VT_SCENARIO_END_YEAR", "2032")),
        aggregation=os.getenv("VT_AGGREGATION", "mean"),
        smoothing_digits=int(os.getenv("VT_SMOOTHING_DIGITS", "4")),
    )


@dataclass(frozen=True)
class ServerConfig:
    api_key: str | None = None
    log_level: str = "INFO"
    port: int = 8000


def get_server_config() -> ServerConfig:
    return ServerConfig(
        api_key=os.getenv("API_KEY") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "8000")),
    )
