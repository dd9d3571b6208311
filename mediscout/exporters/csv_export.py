"""
CSV exporter for MediScout.

Flattens cohort records into one row per record. Nested `vitals` become
`vitals_<field>` columns and `simulatedAiImageAnalysis` becomes
`aiImage_<field>` columns; any other nested object is written as JSON text.
Text cells are quoted, numbers are not, and missing values are empty.
Rows end in CRLF.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Iterable

from mediscout.models import PatientRecord

DEFAULT_FILENAME = "mediscout_synthetic_data.csv"

FLATTENED_PREFIXES = {
    "vitals": "vitals_",
    "simulatedAiImageAnalysis": "aiImage_",
}

ROW_SEPARATOR = "\r\n"


def _as_dict(record: PatientRecord | dict[str, Any]) -> dict[str, Any]:
    if isinstance(record, PatientRecord):
        return record.to_dict()
    return record


def flatten_header(first: dict[str, Any]) -> list[str]:
    """Column names, in the first record's key order."""
    header = []
    for key, value in first.items():
        if isinstance(value, dict) and key in FLATTENED_PREFIXES:
            prefix = FLATTENED_PREFIXES[key]
            header.extend(f"{prefix}{sub_key}" for sub_key in value)
        else:
            header.append(key)
    return header


def _cell(row: dict[str, Any], column: str) -> Any:
    for key, prefix in FLATTENED_PREFIXES.items():
        if column.startswith(prefix):
            nested = row.get(key) or {}
            return _encode(nested.get(column[len(prefix):]))
    return _encode(row.get(column))


def _encode(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (dict, list)):
        # Nested objects are embedded as JSON text
        return json.dumps(value)
    return value


def export_csv(
    records: Iterable[PatientRecord | dict[str, Any]],
    output_path: Path | None = None,
) -> str | None:
    """
    Export records to CSV text.

    Args:
        records: Patient records (models or their serialized dicts)
        output_path: Optional path to write the CSV file

    Returns:
        The CSV text, or None when there are no records (nothing is written).
    """
    rows = [_as_dict(r) for r in records]
    if not rows:
        return None

    header = flatten_header(rows[0])
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator=ROW_SEPARATOR)
    writer.writerow(header)
    for row in rows:
        writer.writerow([_cell(row, column) for column in header])
    csv_text = buffer.getvalue()

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(csv_text)

    return csv_text
