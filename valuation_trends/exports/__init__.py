"""Exports & reporting: CSV writers and a Markdown summary.

- writers.py: tidy records, aligned datasets and table rows as CSV
- reports.py: summary.md with controls, coverage and P/S change stats
"""
