"""Cohort aggregation: per-year log P/S (log of mean, or median of logs)."""
