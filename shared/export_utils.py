"""
Serialisers for admin data exports (CSV, JSON, zipped CSV bundles).

Rows are plain dicts as returned by the repositories. The CSV header is
taken from the first row's keys; later rows are written against that
header, missing keys and ``None`` become empty cells, and a cell is
quoted only when it contains a comma, quote or line break.
"""

from __future__ import annotations

import csv
import io
import json
import zipfile
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId


def _to_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=_json_default)
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, ObjectId):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """Render *rows* as CSV text, or ``None`` when there are no rows."""
    if not rows:
        return None

    headers = list(rows[0].keys())
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_to_cell(row.get(header)) for header in headers])
    # No trailing newline after the last record
    return output.getvalue().rstrip("\n")


def to_json(data: Any) -> str:
    """Pretty-print *data* as JSON (2-space indent), handling dates and ObjectIds."""
    return json.dumps(data, indent=2, default=_json_default)


def csv_bundle(tables: Mapping[str, Sequence[Mapping[str, Any]]]) -> bytes:
    """Zip one ``<table>.csv`` per non-empty table and return the archive bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for table, rows in tables.items():
            content = rows_to_csv(rows)
            if content is None:
                continue
            archive.writestr(f"{table}.csv", content)
    return buffer.getvalue()
