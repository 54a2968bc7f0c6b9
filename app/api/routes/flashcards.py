from fastapi import APIRouter, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.flashcard import (
    FlashcardGenerateRequest,
    FlashcardSchema,
    FlashcardSetResponse,
    OptionsRequest,
    OptionsResponse,
)
from app.services.flashcard_service import FlashcardRequest, generate_flashcards, generate_options

router = APIRouter(prefix="/flashcards", tags=["Flashcards"])


@router.post("/generate", response_model=FlashcardSetResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_flashcards_endpoint(request: Request, body: FlashcardGenerateRequest):
    """Generate flashcards from a class name, chat history, topic or notes."""
    cards = await generate_flashcards(FlashcardRequest(
        class_name=body.class_name,
        chat_history=body.chat_history,
        topic=body.topic,
        context=body.context,
    ))
    return FlashcardSetResponse(
        flashcards=[FlashcardSchema(question=c.question, answer=c.answer) for c in cards]
    )


@router.post("/options", response_model=OptionsResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_options_endpoint(request: Request, body: OptionsRequest):
    """Generate four multiple-choice options for a flashcard."""
    options = await generate_options(body.question, body.correct_answer)
    return OptionsResponse(options=options)
