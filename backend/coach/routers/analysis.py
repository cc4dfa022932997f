# coach/routers/analysis.py
from fastapi import APIRouter, Depends
import logging

from coach.dependencies import get_analysis_service, get_current_user
from coach.models.database import User
from coach.models.schemas import AnalysisInput, AnalysisResult, RewriteRequest, RewriteResponse
from coach.services.analysis_service import AnalysisService, normalize_tone

router = APIRouter()
log = logging.getLogger(__name__)


# ------------ Transcript analysis (JSON) accepts camel+snake -------------
@router.post("/analyze", response_model=AnalysisResult)
async def analyze(
    req: AnalysisInput,
    user: User = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    # never fails: falls back to the heuristic or a degraded default
    result = await service.analyze_transcript(req.transcript, req.question, req.duration_seconds)
    log.debug("analysis for user %s: overall=%s", user.id, result.overall_score)
    return result


# ------------ Polish answer -------------
@router.post("/rewrite", response_model=RewriteResponse)
async def rewrite(
    req: RewriteRequest,
    user: User = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    tone = normalize_tone(req.tone)
    text = await service.rewrite_answer(req.transcript, tone)
    return RewriteResponse(tone=tone, rewritten_answer=text)
