"""Panel ingestion: wide company/metric panels and user overlays.

- tidy.py: cell parsing, block segmentation, wide -> tidy records
- overlay.py: two-column (year, value) CSV overlays
"""
