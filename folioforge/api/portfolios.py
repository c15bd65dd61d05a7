"""Portfolio generation API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from ..exceptions import GenerationNotConfiguredError
from ..generation.completeness import analyze
from ..generation.orchestrator import ContinuationOrchestrator
from ..schemas.generation import CompletionVerdict, GenerationResult
from ..schemas.portfolio import AnalyzeRequest, ContinueRequest, EditRequest, PortfolioRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portfolios", tags=["portfolios"])


def get_orchestrator(request: Request) -> ContinuationOrchestrator:
    """The orchestrator built at startup. Raises 503 when generation is disabled."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise GenerationNotConfiguredError()
    return orchestrator


@router.post("/generate", response_model=GenerationResult)
async def generate_portfolio(
    payload: PortfolioRequest,
    orchestrator: ContinuationOrchestrator = Depends(get_orchestrator),
):
    """Generate a portfolio, continuing automatically if the model output is truncated.

    Always 200: success or failure is reported in the body.
    """
    result = await orchestrator.generate(payload)
    logger.info(
        "Portfolio generation finished",
        extra={
            "success": result.success,
            "incomplete": result.incomplete,
            "attempts_made": result.attempts_made,
        },
    )
    return result


@router.post("/continue", response_model=GenerationResult)
async def continue_portfolio(
    payload: ContinueRequest,
    orchestrator: ContinuationOrchestrator = Depends(get_orchestrator),
):
    """Resume a partial portfolio returned by an earlier generation."""
    return await orchestrator.continue_manually(payload.partial_html, payload)


@router.post("/edit", response_model=GenerationResult)
async def edit_portfolio(
    payload: EditRequest,
    orchestrator: ContinuationOrchestrator = Depends(get_orchestrator),
):
    """Apply a plain-language edit to a portfolio.

    A truncated edit result is continued automatically. If it is still
    partial, send it back as ``partial_html`` with the same edit request.
    """
    if payload.partial_html:
        result = await orchestrator.continue_edit(payload.partial_html, payload.edit_request)
    else:
        result = await orchestrator.edit(payload.html, payload.edit_request)
    logger.info(
        "Portfolio edit finished",
        extra={
            "success": result.success,
            "incomplete": result.incomplete,
            "attempts_made": result.attempts_made,
            "resumed": bool(payload.partial_html),
        },
    )
    return result


@router.post("/analyze", response_model=CompletionVerdict)
def analyze_portfolio(payload: AnalyzeRequest):
    """Completeness verdict for arbitrary HTML. No model call."""
    return analyze(payload.html)
