"""
Upload API Routes

Endpoints for dataset ingestion and session management.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from api.deps import get_session
from api.schemas.requests import DatasetPayload
from api.schemas.responses import SessionInfo, UploadResponse
from config import get_settings
from core.cache import Session, derivation_cache, session_store
from core.csv_parser import CSVParseError, csv_parser
from core.dataset import Dataset
from core.logging_config import upload_logger as logger
from core.type_inference import type_inferrer


router = APIRouter()


def open_session(name: str, dataset: Dataset) -> UploadResponse:
    """Profile a dataset once and register it under a new session."""
    session_id = csv_parser.generate_session_id(name)
    summary = type_inferrer.summarize(dataset)

    session_store.create(Session(
        session_id=session_id,
        name=name,
        dataset=dataset,
        summary=summary,
    ))

    return UploadResponse(
        session_id=session_id,
        name=name,
        row_count=dataset.row_count,
        column_count=dataset.column_count,
        columns=list(dataset.headers),
        summary=summary,
        message=f"Successfully loaded {name}",
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
) -> UploadResponse:
    """
    Upload a CSV file for the dashboard.

    Creates a new session and returns the inferred column summary.
    """
    settings = get_settings()

    # Validate file type
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail="Only CSV files are supported"
        )

    # Read file content
    content = await file.read()

    # Check file size
    file_size_mb = len(content) / (1024 * 1024)
    if file_size_mb > settings.max_file_size_mb:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_file_size_mb}MB"
        )

    try:
        dataset = csv_parser.parse_bytes(content, file.filename)
    except CSVParseError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=422, detail=str(e))

    return open_session(file.filename, dataset)


@router.post("/datasets", response_model=UploadResponse)
async def create_dataset(payload: DatasetPayload) -> UploadResponse:
    """Load an already-parsed dataset supplied as JSON."""
    try:
        dataset = Dataset.from_records(payload.headers, payload.rows)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return open_session(payload.name, dataset)


@router.get("/sessions/{session_id}", response_model=SessionInfo)
async def get_session_info(session: Session = Depends(get_session)) -> SessionInfo:
    """Get session information."""
    return SessionInfo(
        session_id=session.session_id,
        name=session.name,
        created_at=datetime.fromtimestamp(session.created_at),
        row_count=session.dataset.row_count,
        column_count=session.dataset.column_count,
        columns=list(session.dataset.headers),
        status="ready",
    )


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    """Delete a session and its cached chart data."""
    if not session_store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")

    dropped = derivation_cache.invalidate_prefix(f"{session_id}:")
    logger.info(f"Session {session_id} deleted, {dropped} cached results dropped")

    return {"message": f"Session {session_id} deleted successfully"}


@router.get("/sessions")
async def list_sessions() -> dict:
    """List all active sessions."""
    sessions = [
        {
            "session_id": s.session_id,
            "name": s.name,
            "row_count": s.dataset.row_count,
            "status": "ready",
        }
        for s in session_store.list_sessions()
    ]

    return {"sessions": sessions, "count": len(sessions)}


@router.post("/clear-cache")
async def clear_cache() -> dict:
    """Drop every session and all cached chart data."""
    cached = len(derivation_cache)
    derivation_cache.clear()
    sessions_cleared = session_store.clear_all()
    logger.info(f"Cleared {sessions_cleared} sessions and {cached} cached results")

    return {
        "message": "Cache cleared successfully",
        "sessions_cleared": sessions_cleared,
        "results_cleared": cached,
    }
