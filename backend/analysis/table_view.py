"""
Table View Engine

Search filtering, typed stable sorting and clamped pagination over the
rows of a dataset. The dataset is never modified; every view is derived
from (dataset, TableViewState).
"""

import math
import unicodedata
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from config import get_settings
from core.cells import display, is_missing, to_number, to_text
from core.dataset import Dataset, Row
from core.logging_config import dashboard_logger as logger


class SortDirection(str, Enum):
    """Sort direction of a table column."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    column: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class TableViewState:
    """
    Interactive grid state.

    Transitions return new states. Pages are clamped when a view is
    rendered, so a stale page never surfaces as an error.
    """

    search_term: str = ""
    selected_column: Optional[str] = None
    sort: Optional[SortSpec] = None
    page: int = 1
    page_size: int = 10

    def with_search(self, term: str) -> "TableViewState":
        """New search term; always back to the first page."""
        return replace(self, search_term=term, page=1)

    def with_column(self, column: Optional[str]) -> "TableViewState":
        """Restrict search to one column, or to all columns with None/""."""
        return replace(self, selected_column=column or None)

    def toggle_sort(self, column: str) -> "TableViewState":
        """Flip direction on the sorted column, start ascending on a new one."""
        if self.sort is not None and self.sort.column == column and self.sort.direction == SortDirection.ASC:
            return replace(self, sort=SortSpec(column, SortDirection.DESC))
        return replace(self, sort=SortSpec(column, SortDirection.ASC))

    def go_to(self, page: int, total_pages: int) -> "TableViewState":
        return replace(self, page=clamp_page(page, total_pages))

    def next_page(self, total_pages: int) -> "TableViewState":
        return self.go_to(self.page + 1, total_pages)

    def previous_page(self, total_pages: int) -> "TableViewState":
        return self.go_to(self.page - 1, total_pages)


@dataclass
class TableView:
    """One rendered page plus pagination metadata."""

    headers: list[str]
    rows: list[Row]
    current_page: int
    total_pages: int
    range_start: int
    range_end: int
    total_filtered: int
    total_rows: int
    state: TableViewState = field(default_factory=TableViewState)

    def cells(self) -> list[list[str]]:
        """Display text per header, with "-" for absent or null cells."""
        return [[display(row.get(h)) for h in self.headers] for row in self.rows]

    def to_dict(self) -> dict[str, Any]:
        return {
            "headers": self.headers,
            "rows": self.cells(),
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "total_filtered": self.total_filtered,
            "total_rows": self.total_rows,
            "search_term": self.state.search_term,
            "selected_column": self.state.selected_column,
            "sort_column": self.state.sort.column if self.state.sort else None,
            "sort_direction": self.state.sort.direction.value if self.state.sort else None,
        }


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), max(1, total_pages))


def count_pages(total: int, page_size: int) -> int:
    """Number of pages; an empty result still shows one page."""
    return max(1, math.ceil(total / page_size))


def tokenize(search_term: str) -> list[str]:
    """Lowercase whitespace-separated tokens, empties discarded."""
    return (search_term or "").lower().split()


def collation_key(text: str) -> tuple[str, str]:
    """Case- and accent-insensitive ordering, raw text as tie-break."""
    return unicodedata.normalize("NFKD", text).casefold(), text


def _cell_contains(value: Any, token: str) -> bool:
    if is_missing(value):
        return False
    return token in to_text(value).lower()


def column_sort_key(column: str, rows: Sequence[Row]) -> Callable[[Row], tuple]:
    """
    Sort key for one column, with the mode chosen once for all rows:
    numeric when every cell parses as a number, collation order otherwise.
    """
    if all(to_number(row.get(column)) is not None for row in rows):
        return lambda row: (to_number(row.get(column)),)
    return lambda row: collation_key(to_text(row.get(column)))


class TableViewEngine:
    """Derives paginated table views from a dataset."""

    def __init__(self):
        self.settings = get_settings()

    def new_state(self) -> TableViewState:
        return TableViewState(page_size=self.settings.dashboard.page_size)

    def filter_rows(
        self,
        dataset: Dataset,
        search_term: str,
        selected_column: Optional[str] = None,
    ) -> list[Row]:
        """
        Rows where every token occurs in the selected column, or in any
        column when none is selected. An unknown column counts as none.
        """
        tokens = tokenize(search_term)
        if not tokens:
            return list(dataset.rows)

        if selected_column and dataset.has_column(selected_column):
            return [
                row for row in dataset.rows
                if all(_cell_contains(row.get(selected_column), t) for t in tokens)
            ]

        headers = dataset.headers
        return [
            row for row in dataset.rows
            if all(any(_cell_contains(row.get(h), t) for h in headers) for t in tokens)
        ]

    def sort_rows(
        self,
        rows: Sequence[Row],
        sort: Optional[SortSpec],
        headers: Sequence[str],
    ) -> list[Row]:
        """
        Stable sort by one column.

        A column whose present cells are all numeric sorts numerically;
        any text cell switches the whole column to collation order.
        Missing cells go last in either direction.
        """
        if sort is None or sort.column not in headers:
            return list(rows)

        column = sort.column
        present = [row for row in rows if not is_missing(row.get(column))]
        missing = [row for row in rows if is_missing(row.get(column))]

        ordered = sorted(
            present,
            key=column_sort_key(column, present),
            reverse=sort.direction == SortDirection.DESC,
        )
        return ordered + missing

    def matching_rows(self, dataset: Dataset, state: TableViewState) -> list[Row]:
        """Filtered and sorted rows of the whole view (all pages)."""
        filtered = self.filter_rows(dataset, state.search_term, state.selected_column)
        return self.sort_rows(filtered, state.sort, dataset.headers)

    def render(self, dataset: Dataset, state: TableViewState) -> TableView:
        """Render the page selected by `state`, clamping the page index."""
        rows = self.matching_rows(dataset, state)
        page_size = max(1, state.page_size)
        total_filtered = len(rows)
        total_pages = count_pages(total_filtered, page_size)
        page = clamp_page(state.page, total_pages)

        if page != state.page:
            logger.debug(f"Clamped table page {state.page} -> {page} of {total_pages}")
            state = replace(state, page=page)

        start = (page - 1) * page_size
        page_rows = rows[start:start + page_size]

        return TableView(
            headers=list(dataset.headers),
            rows=page_rows,
            current_page=page,
            total_pages=total_pages,
            range_start=start + 1 if total_filtered else 0,
            range_end=min(page * page_size, total_filtered),
            total_filtered=total_filtered,
            total_rows=dataset.row_count,
            state=state,
        )


# Global instance
table_view_engine = TableViewEngine()
