"""
Cell Coercion

Every loosely-typed cell passes through this module. Cells are plain Python
values tagged by CellKind; coercion to numbers, instants and display text is
best-effort and never raises.
"""

import math
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any, Optional, Sequence

import polars as pl


PLACEHOLDER = "-"

# Tried in order; the first format that parses a value wins.
NAIVE_INSTANT_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%.f",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S%.f",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",           # 01/15/2024
    "%d/%m/%Y",           # 15/01/2024
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%B %d, %Y",          # January 15, 2024
    "%b %d, %Y",          # Jan 15, 2024
    "%d %B %Y",           # 15 January 2024
    "%d %b %Y",           # 15 Jan 2024
)

OFFSET_INSTANT_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S%.f%z",
    "%Y-%m-%d %H:%M:%S%z",
)


class CellKind(str, Enum):
    """Tag of a raw cell value."""

    NULL = "null"
    NUMBER = "number"
    TEXT = "text"
    RAW = "raw"


def is_missing(value: Any) -> bool:
    """True for None and float NaN."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def classify(value: Any) -> CellKind:
    """Tag a cell without coercing it."""
    if is_missing(value):
        return CellKind.NULL
    if isinstance(value, bool):
        return CellKind.RAW
    if isinstance(value, Real):
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.NUMBER if _parse_number_text(value) is not None else CellKind.TEXT
    return CellKind.RAW


def _parse_number_text(text: str) -> Optional[float]:
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_number(value: Any) -> Optional[float]:
    """Coerce a cell to a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (Real, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        return _parse_number_text(value)
    return None


def to_text(value: Any) -> Optional[str]:
    """Display text for a cell; None for missing cells."""
    if is_missing(value):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def display(value: Any, placeholder: str = PLACEHOLDER) -> str:
    """Render a cell for a table, substituting the placeholder for missing cells."""
    text = to_text(value)
    return placeholder if text is None else text


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _parse_text_instants(texts: list[Optional[str]]) -> list[Optional[datetime]]:
    frame = pl.DataFrame({"raw": texts}, schema={"raw": pl.Utf8})
    raw = pl.col("raw").str.replace(r"Z$", "+00:00")

    parsed = []
    for fmt in NAIVE_INSTANT_FORMATS + OFFSET_INSTANT_FORMATS:
        expr = raw.str.to_datetime(fmt, time_unit="us", strict=False)
        if "%z" in fmt:
            expr = expr.dt.replace_time_zone(None)
        try:
            parsed.append(frame.select(expr.alias(fmt)).to_series())
        except pl.exceptions.PolarsError:
            continue

    if not parsed:
        return [None] * len(texts)

    attempts = pl.DataFrame(parsed)
    merged = attempts.select(pl.coalesce([pl.col(s.name) for s in parsed]).alias("instant"))
    return merged["instant"].to_list()


def parse_instants(values: Sequence[Any]) -> list[Optional[datetime]]:
    """
    Coerce a batch of cells to naive (UTC) datetimes.

    Strings are parsed with one vectorized Polars pass per format.
    Numbers, including numeric strings, are never treated as instants.
    """
    result: list[Optional[datetime]] = [None] * len(values)
    texts: list[Optional[str]] = []
    has_text = False

    for i, value in enumerate(values):
        text = None
        if isinstance(value, datetime):
            result[i] = _naive_utc(value)
        elif isinstance(value, date):
            result[i] = datetime.combine(value, time())
        elif isinstance(value, str) and classify(value) is CellKind.TEXT:
            text = value.strip()
            has_text = True
        texts.append(text)

    if not has_text:
        return result

    try:
        parsed = _parse_text_instants(texts)
    except pl.exceptions.PolarsError:
        return result

    for i, moment in enumerate(parsed):
        if moment is not None:
            result[i] = moment
    return result


def to_instant(value: Any) -> Optional[datetime]:
    """Coerce a single cell to an instant."""
    return parse_instants([value])[0]
