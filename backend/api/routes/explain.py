"""
Explain API Routes

LLM explanations of dashboard charts using a local Ollama model.
"""

import time

from fastapi import APIRouter, Depends

from analysis.orchestrator import ChartKind, chart_orchestrator
from api.deps import get_session, require_column
from api.schemas.requests import ExplainRequest
from api.schemas.responses import ExplainResponse
from core.cache import Session
from core.logging_config import llm_logger as logger
from llm.context_builder import context_builder
from llm.ollama_client import LLMUnavailableError, ollama_client
from llm.prompts import EXPLANATION_FALLBACK, SYSTEM_PROMPT


router = APIRouter()


@router.post("/explain/{session_id}", response_model=ExplainResponse)
async def explain_chart(
    request: ExplainRequest,
    session: Session = Depends(get_session),
) -> ExplainResponse:
    """
    Explain one chart of the dashboard.

    The chart is built with the same defaults the dashboard uses, so the
    explanation describes exactly what is on screen. When the LLM cannot
    be reached the fallback message is returned with `available` false.
    """
    start_time = time.perf_counter()
    kind = ChartKind(request.chart)

    for name in (request.column, request.secondary_column):
        if name is not None:
            require_column(session, name)

    chart = chart_orchestrator.build(
        session.dataset,
        session.summary,
        kind,
        column=request.column,
        secondary_column=request.secondary_column,
    )

    column, secondary_column = request.column, request.secondary_column
    if chart.columns:
        if kind == ChartKind.TIME_SERIES:
            secondary_column, column = chart.columns[0], chart.columns[-1]
        else:
            column = chart.columns[0]
            secondary_column = chart.columns[1] if len(chart.columns) > 1 else secondary_column

    prompt = context_builder.build_chart_prompt(kind.value, column, secondary_column)
    context = None
    if request.include_context:
        context = context_builder.build_data_context(
            session.dataset,
            session.summary,
            chart.data if chart.available else None,
        )

    try:
        explanation = await ollama_client.explain(prompt, context, system=SYSTEM_PROMPT)
        available = True
    except LLMUnavailableError as e:
        logger.error(f"Explanation for {kind.value} chart failed: {e}")
        explanation = EXPLANATION_FALLBACK
        available = False

    return ExplainResponse(
        session_id=session.session_id,
        chart=kind.value,
        prompt=prompt,
        explanation=explanation,
        available=available,
        processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )


@router.get("/explain/status")
async def explain_status() -> dict:
    """Whether the explanation model is reachable and installed."""
    return await ollama_client.status()
