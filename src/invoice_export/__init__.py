"""
Invoice export – tabular export of extracted invoice and product data.

Turns records from the extraction and enrichment pipelines into CSV, TSV
and JSON files or clipboard text.
"""

__all__ = [
    "config",
    "logging",
    "paths",
]
