"""
Notes Service: study notes and short summaries from a student's chat with the assistant.

If every AI provider is down, notes degrade to an extract of the assistant's
own answers so the conversation is not lost; summaries have no such fallback.
"""
import json
from dataclasses import dataclass, field

from app.core.exceptions import AIUnavailableError, InvalidInputError
from app.core.logging_config import get_logger
from app.services import ai_service
from app.services.ai_service import ROLE_LABELS, ChatTurn

logger = get_logger(__name__)

EXTRACTIVE = "extractive"

# Chat UI senders mapped to conversation roles; anything else (system notices,
# file-upload events) is dropped
SENDER_ROLES = {"user": "user", "bot": "assistant", "assistant": "assistant"}

MAX_SUMMARY_MESSAGES = 100
MAX_SUMMARY_CHARS = 10000
EXTRACT_POINTS = 5
EXTRACT_POINT_CHARS = 300

NOTES_SYSTEM_PROMPT = (
    "You are an expert at creating study notes and organizing information. You help "
    "students by extracting key information from conversations and structuring it into "
    "comprehensive, easy-to-review notes."
)

SUMMARY_SYSTEM_PROMPT = (
    "You are CourseConnect AI. You summarize a student's study conversations in a "
    "natural, specific and brief way."
)


@dataclass
class ChatMessage:
    sender: str
    text: object = ""


@dataclass
class CourseData:
    course_name: str | None = None
    course_code: str | None = None
    topics: list[str] = field(default_factory=list)
    assignments: list[str] = field(default_factory=list)
    exams: list[str] = field(default_factory=list)


@dataclass
class StudyNotes:
    notes: str
    topics_mentioned: list[str]
    topics_not_discussed: list[str]
    message_count: int
    provider: str  # primary, fallback or extractive


def to_chat_turns(messages: list[ChatMessage]) -> list[ChatTurn]:
    """Keep student and assistant messages, in order, as conversation turns."""
    turns = []
    for message in messages:
        role = SENDER_ROLES.get((message.sender or "").lower())
        if role is None:
            continue
        content = message.text if isinstance(message.text, str) else json.dumps(message.text)
        if content.strip():
            turns.append(ChatTurn(role=role, content=content.strip()))
    return turns


def conversation_text(turns: list[ChatTurn]) -> str:
    return "\n\n".join(f"{ROLE_LABELS[turn.role]}: {turn.content}" for turn in turns)


def build_course_context(course_data: CourseData | None) -> str:
    if course_data is None:
        return ""

    lines = []
    if course_data.course_name or course_data.course_code:
        name = course_data.course_name or course_data.course_code
        if course_data.course_name and course_data.course_code:
            name += f" ({course_data.course_code})"
        lines.append(f"Course: {name}")
    if course_data.topics:
        lines.append(f"Topics: {', '.join(course_data.topics)}")
    if course_data.assignments:
        lines.append(f"Assignments: {', '.join(course_data.assignments)}")
    if course_data.exams:
        lines.append(f"Exams: {', '.join(course_data.exams)}")
    return "\n".join(lines)


def split_topics(course_data: CourseData | None, text: str) -> tuple[list[str], list[str]]:
    """Course topics the conversation mentions, and the ones it never touches."""
    if course_data is None:
        return [], []
    lowered = text.lower()
    mentioned = [t for t in course_data.topics if t.strip() and t.lower() in lowered]
    missing = [t for t in course_data.topics if t.strip() and t.lower() not in lowered]
    return mentioned, missing


def build_notes_prompt(turns: list[ChatTurn], course_data: CourseData | None, create_study_guide: bool) -> str:
    parts = [
        "Generate study notes from a student's chat conversation with an AI tutor.",
    ]
    course_context = build_course_context(course_data)
    if course_context:
        parts.append(f"COURSE CONTEXT:\n{course_context}")
    parts.append(f"CHAT CONVERSATION:\n{conversation_text(turns)}")

    tasks = [
        "1. Extract the key concepts, definitions, explanations and insights.",
        "2. Group related information by topic.",
        "3. Point out course topics that were not discussed.",
        "4. Use clear headings (## for sections, ### for subsections) and bullet points.",
        "5. Keep formulas, examples and study tips that came up.",
    ]
    if create_study_guide:
        tasks.append("6. Format the notes as a study guide and end with review questions.")
    parts.append("TASK:\n" + "\n".join(tasks))
    parts.append("Generate the notes now:")
    return "\n\n".join(parts)


def extractive_notes(turns: list[ChatTurn]) -> str:
    """Notes built from the assistant's answers alone, used when no AI is reachable."""
    answers = [turn.content for turn in turns if turn.role == "assistant"][:EXTRACT_POINTS]
    points = []
    for index, answer in enumerate(answers, 1):
        if len(answer) > EXTRACT_POINT_CHARS:
            answer = answer[:EXTRACT_POINT_CHARS].rstrip() + "..."
        points.append(f"**Key Point {index}:**\n{answer}")

    body = "\n\n".join(points) if points else "The conversation has no assistant answers to summarize yet."
    return f"# Study Notes from Chat Conversation\n\n## Conversation Summary\n\n{body}"


async def generate_notes(
    chat_messages: list[ChatMessage] | None,
    course_data: CourseData | None = None,
    create_study_guide: bool = False,
) -> StudyNotes:
    """
    Generate organized study notes from a chat conversation.

    Raises:
        InvalidInputError: no messages, or none from the student or assistant
    """
    if not chat_messages:
        raise InvalidInputError("Chat messages are required")

    turns = to_chat_turns(chat_messages)
    if not turns:
        raise InvalidInputError("No relevant messages found in chat history")

    logger.info(f"Generating study notes | messages={len(turns)} | study_guide={create_study_guide}")
    mentioned, missing = split_topics(course_data, conversation_text(turns))

    try:
        answer = await ai_service.generate_content(
            build_notes_prompt(turns, course_data, create_study_guide),
            NOTES_SYSTEM_PROMPT,
            max_tokens=2000,
            temperature=0.7,
        )
        notes, provider = answer.answer, answer.provider
    except AIUnavailableError as e:
        logger.warning(f"AI unavailable, building extractive notes | details={e.details}")
        notes, provider = extractive_notes(turns), EXTRACTIVE

    return StudyNotes(
        notes=notes,
        topics_mentioned=mentioned,
        topics_not_discussed=missing,
        message_count=len(turns),
        provider=provider,
    )


def summary_source(messages: list[str] | str | None) -> str:
    if isinstance(messages, str):
        return messages.strip()[:MAX_SUMMARY_CHARS]
    if not messages:
        return ""
    recent = [m.strip() for m in messages[-MAX_SUMMARY_MESSAGES:] if m and m.strip()]
    return "\n\n".join(recent)


async def summarize_chat(
    messages: list[str] | str | None,
    course_data: CourseData | None = None,
    chat_title: str | None = None,
) -> str:
    """
    Summarize a chat in two to four sentences.

    Raises:
        InvalidInputError: nothing to summarize
        AIUnavailableError: every AI provider failed
    """
    text = summary_source(messages)
    if not text:
        raise InvalidInputError("No messages to summarize")

    parts = [
        "Provide a concise overall summary (2-4 sentences) of this chat conversation. "
        "Focus on the main points discussed and what the student has been working on.",
    ]
    course_context = build_course_context(course_data)
    if course_context or chat_title:
        parts.append("Context:\n" + (course_context or f"Chat: {chat_title}"))
    parts.append(f"Chat conversation:\n{text}")
    parts.append(
        "Be specific about the topics, questions or concepts discussed. "
        "Keep it brief but informative."
    )

    answer = await ai_service.generate_content("\n\n".join(parts), SUMMARY_SYSTEM_PROMPT, max_tokens=400, temperature=0.5)
    logger.info(f"Chat summarized | provider={answer.provider} | chars={len(text)}")
    return answer.answer
