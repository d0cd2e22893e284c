"""
CSV Export

Serializes headers and the currently filtered rows back to CSV text.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from core.cells import is_missing, to_text
from core.dataset import Row
from core.logging_config import dashboard_logger as logger


CSV_MEDIA_TYPE = "text/csv;charset=utf-8"


@dataclass
class ExportBlob:
    """CSV payload ready to be downloaded."""

    content: str
    filename: str
    media_type: str = CSV_MEDIA_TYPE
    row_count: int = 0


def encode_field(value: Any) -> str:
    """
    Encode one CSV field.

    Missing cells become empty fields. Strings containing a comma are
    quoted with inner quotes doubled; everything else is written as its
    display text.
    """
    if is_missing(value):
        return ""
    if isinstance(value, str) and "," in value:
        return '"' + value.replace('"', '""') + '"'
    return to_text(value)


def encode_csv(headers: Sequence[str], rows: Sequence[Row]) -> Optional[str]:
    """
    Header line then one line per row, joined by newlines.

    Returns None when there are no rows to export.
    """
    if not rows:
        return None

    lines = [",".join(encode_field(h) for h in headers)]
    lines.extend(
        ",".join(encode_field(row.get(h)) for h in headers)
        for row in rows
    )
    return "\n".join(lines)


def export_filename(on: Optional[date] = None) -> str:
    """Suggested download name, e.g. data-export-2024-01-31.csv."""
    on = on or date.today()
    return f"data-export-{on.isoformat()}.csv"


def export_rows(
    headers: Sequence[str],
    rows: Sequence[Row],
    on: Optional[date] = None,
) -> Optional[ExportBlob]:
    """Build the export blob, or None for an empty row set."""
    content = encode_csv(headers, rows)
    if content is None:
        logger.debug("Export skipped: no rows match the current filter")
        return None

    return ExportBlob(
        content=content,
        filename=export_filename(on),
        row_count=len(rows),
    )
