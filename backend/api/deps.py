"""
Route Dependencies

Shared lookups for session-scoped endpoints.
"""

from fastapi import HTTPException

from core.cache import Session, session_store


def get_session(session_id: str) -> Session:
    """Resolve a live session or answer 404."""
    session = session_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def require_column(session: Session, column: str) -> str:
    """Reject a column the session's dataset does not have."""
    if not session.dataset.has_column(column):
        raise HTTPException(status_code=404, detail=f"Column '{column}' not found")
    return column
