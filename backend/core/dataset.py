"""
Dataset Model

Immutable in-memory table consumed by every derivation engine.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence

import polars as pl


Row = Mapping[str, Any]


@dataclass(frozen=True)
class Dataset:
    """
    Ordered headers plus rows of loosely-typed cells.

    Rows may omit keys; an absent key reads as a missing cell. The engines
    only derive views from a dataset, they never modify it.
    """

    headers: tuple[str, ...]
    rows: tuple[Row, ...]

    @classmethod
    def from_records(
        cls,
        headers: Sequence[str],
        rows: Sequence[Row],
    ) -> "Dataset":
        """
        Build a dataset from headers and row mappings.

        Raises:
            ValueError: if headers are not unique
        """
        headers = tuple(str(h) for h in headers)
        seen = set()
        duplicates = [h for h in headers if h in seen or seen.add(h)]
        if duplicates:
            raise ValueError(f"Duplicate column names: {sorted(set(duplicates))}")

        return cls(headers=headers, rows=tuple(dict(row) for row in rows))

    @classmethod
    def from_polars(cls, df: pl.DataFrame) -> "Dataset":
        """Materialize a Polars DataFrame as a dataset."""
        return cls(headers=tuple(df.columns), rows=tuple(df.to_dicts()))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def has_column(self, column: str) -> bool:
        return column in self.headers

    def column_values(self, column: str) -> Iterator[Any]:
        """Yield the cell of every row for a column (None when absent)."""
        for row in self.rows:
            yield row.get(column)

    def head(self, n: int) -> tuple[Row, ...]:
        return self.rows[:n]
