"""
Table API Routes

Searchable, sortable, paginated table view and CSV export of the
currently filtered rows.
"""

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from analysis.export import export_rows
from analysis.table_view import SortDirection, SortSpec, TableViewState, table_view_engine
from api.deps import get_session
from api.schemas.responses import TableViewResponse
from core.cache import Session
from core.logging_config import dashboard_logger as logger


router = APIRouter()


def view_state(
    search: str = Query(default="", description="Whitespace-separated search tokens"),
    column: Optional[str] = Query(default=None, description="Restrict search to one column"),
    sort: Optional[str] = Query(default=None, description="Column to sort by"),
    direction: SortDirection = Query(default=SortDirection.ASC),
    page: int = Query(default=1, description="1-based page, clamped when rendered"),
) -> TableViewState:
    """Assemble the table state from query parameters; the page size is fixed."""
    return replace(
        table_view_engine.new_state(),
        search_term=search,
        selected_column=column or None,
        sort=SortSpec(sort, direction) if sort else None,
        page=page,
    )


@router.get("/table/{session_id}", response_model=TableViewResponse)
def get_table(
    session: Session = Depends(get_session),
    state: TableViewState = Depends(view_state),
) -> TableViewResponse:
    """One page of the filtered and sorted table."""
    view = table_view_engine.render(session.dataset, state)
    return TableViewResponse(**view.to_dict())


@router.get("/export/{session_id}")
def export_table(
    session: Session = Depends(get_session),
    state: TableViewState = Depends(view_state),
) -> Response:
    """
    Download the rows matching the current search as CSV.

    Sorting applies; pagination does not. Answers 204 when nothing matches.
    """
    rows = table_view_engine.matching_rows(session.dataset, state)
    blob = export_rows(session.dataset.headers, rows)
    if blob is None:
        return Response(status_code=204)

    logger.info(f"Exporting {blob.row_count} rows from session {session.session_id}")
    return Response(
        content=blob.content,
        media_type=blob.media_type,
        headers={"Content-Disposition": f'attachment; filename="{blob.filename}"'},
    )
