"""
Export functionality for MediScout.
"""

from .csv_export import export_csv, flatten_header, DEFAULT_FILENAME
from .json_export import export_json, export_json_summary

__all__ = [
    "export_csv",
    "flatten_header",
    "DEFAULT_FILENAME",
    "export_json",
    "export_json_summary",
]
