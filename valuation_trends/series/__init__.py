"""Year-indexed series: containers, alignment and smoothing.

- types.py: YearSeries and AlignedDataset
- align.py: union year axis with explicit gaps
- smoothing.py: centered moving average that keeps gaps
"""
