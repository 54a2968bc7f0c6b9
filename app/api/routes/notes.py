from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.notes import (
    ChatSummaryRequest,
    ChatSummaryResponse,
    CourseDataSchema,
    NotesGenerateRequest,
    NotesMetadata,
    NotesResponse,
)
from app.services.notes_service import ChatMessage, CourseData, generate_notes, summarize_chat

router = APIRouter(prefix="/notes", tags=["Notes"])


def to_course_data(schema: CourseDataSchema | None) -> CourseData | None:
    if schema is None:
        return None
    return CourseData(
        course_name=schema.course_name,
        course_code=schema.course_code,
        topics=list(schema.topics),
        assignments=[a.name for a in schema.assignments],
        exams=[e.name for e in schema.exams],
    )


@router.post("/generate", response_model=NotesResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_notes_endpoint(request: Request, body: NotesGenerateRequest):
    """Turn a chat conversation into organized study notes."""
    messages = None
    if body.chat_messages is not None:
        messages = [ChatMessage(sender=m.sender, text=m.text) for m in body.chat_messages]

    notes = await generate_notes(
        messages,
        to_course_data(body.course_data),
        create_study_guide=body.options.create_study_guide,
    )
    return NotesResponse(
        notes=notes.notes,
        metadata=NotesMetadata(
            topics_mentioned=notes.topics_mentioned,
            topics_not_discussed=notes.topics_not_discussed,
            message_count=notes.message_count,
            generated_at=datetime.now(timezone.utc),
            provider=notes.provider,
        ),
    )


@router.post("/summarize", response_model=ChatSummaryResponse)
@limiter.limit(settings.ai_rate_limit)
async def summarize_chat_endpoint(request: Request, body: ChatSummaryRequest):
    """Summarize a chat conversation in a few sentences."""
    summary = await summarize_chat(
        body.messages,
        to_course_data(body.course_data),
        chat_title=body.chat_title or body.chat_id,
    )
    return ChatSummaryResponse(summary=summary)
