"""AI router: code explanations, rate limited per user."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from codeshare.api.dependencies import CurrentUserDep, DbDep, get_explanation_service
from codeshare.api.routers.posts import get_post_or_404
from codeshare.core.ai import ExplanationService
from codeshare.core.config import get_settings
from codeshare.core.limiter import limiter
from codeshare.schemas.ai import ExplanationOut

router = APIRouter(prefix="/ai", tags=["ai"])

ExplainerDep = Annotated[ExplanationService, Depends(get_explanation_service)]


def _ai_limit() -> str:
    return get_settings().ai_rate_limit


@router.post("/explain/{post_id}", response_model=ExplanationOut)
@limiter.limit(_ai_limit)
async def explain_post(
    request: Request,
    post_id: uuid.UUID,
    db: DbDep,
    current_user: CurrentUserDep,
    explainer: ExplainerDep,
    refresh: bool = False,
) -> ExplanationOut:
    """Explain a post's code; cached unless ``?refresh=true``."""
    post = await get_post_or_404(db, post_id)
    result = await explainer.explain(db, post, force_refresh=refresh)
    return ExplanationOut(explanation=result.explanation, cached=result.cached)
