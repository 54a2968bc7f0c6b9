from fastapi import APIRouter, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.ai import AskRequest, AskResponse
from app.services.ai_service import ChatTurn, ask

router = APIRouter(prefix="/ai", tags=["AI Assistant"])


@router.post("/ask", response_model=AskResponse)
@limiter.limit(settings.ai_rate_limit)
async def ask_study_question(request: Request, body: AskRequest):
    """Answer a question using the course context and the conversation so far."""
    history = [ChatTurn(role=turn.role, content=turn.content) for turn in body.history]
    answer = await ask(body.question, body.context, history, in_depth=body.in_depth)
    return AskResponse(answer=answer.answer, provider=answer.provider, backend=answer.backend)
