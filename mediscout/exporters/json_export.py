"""
JSON exporter for MediScout.

Exports cohorts as clean, human-readable JSON with camelCase keys.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from mediscout.analytics import summarize
from mediscout.models import PatientRecord


def export_json(
    records: Iterable[PatientRecord],
    output_path: Path | None = None,
    indent: int = 2,
) -> str:
    """
    Export a cohort to JSON format.

    Args:
        records: The records to export
        output_path: Optional path to write the JSON file
        indent: JSON indentation level

    Returns:
        JSON string representation of the records
    """
    data = [r.to_dict() for r in records]
    json_str = json.dumps(data, indent=indent)

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_str, encoding="utf-8")

    return json_str


def export_json_summary(records: list[PatientRecord]) -> dict[str, Any]:
    """
    Export a summary of the cohort (useful for listings/previews).
    """
    summary = summarize(records)
    return {
        "total_records": summary.total_patients,
        "high_risk_records": summary.high_risk_patients,
        "most_common_condition": summary.most_common_condition,
        "most_common_condition_count": summary.most_common_condition_count,
        "date_range": [
            min(r.date for r in records).isoformat(),
            max(r.date for r in records).isoformat(),
        ] if records else [],
    }
