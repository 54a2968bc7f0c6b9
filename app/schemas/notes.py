from datetime import datetime
from typing import Any, Literal

from app.schemas.common import CamelModel


class ChatMessageSchema(CamelModel):
    """One message as the chat UI stores it."""
    sender: str
    text: Any = ""


class NamedItem(CamelModel):
    name: str


class CourseDataSchema(CamelModel):
    course_name: str | None = None
    course_code: str | None = None
    topics: list[str] = []
    assignments: list[NamedItem] = []
    exams: list[NamedItem] = []


class NotesOptions(CamelModel):
    create_study_guide: bool = False


class NotesGenerateRequest(CamelModel):
    chat_messages: list[ChatMessageSchema] | None = None
    course_data: CourseDataSchema | None = None
    options: NotesOptions = NotesOptions()


class NotesMetadata(CamelModel):
    topics_mentioned: list[str]
    topics_not_discussed: list[str]
    message_count: int
    generated_at: datetime
    provider: Literal["primary", "fallback", "extractive"]


class NotesResponse(CamelModel):
    success: bool = True
    notes: str
    metadata: NotesMetadata


class ChatSummaryRequest(CamelModel):
    chat_id: str | None = None
    chat_title: str | None = None
    messages: list[str] | str | None = None
    course_data: CourseDataSchema | None = None


class ChatSummaryResponse(CamelModel):
    success: bool = True
    summary: str
