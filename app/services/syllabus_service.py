"""
Syllabus analysis: structured course information from extracted syllabus text.
"""
from pydantic import ValidationError

from app.core.exceptions import InvalidInputError, MalformedAIResponseError
from app.core.logging_config import get_logger
from app.schemas.syllabus import SyllabusAnalysis
from app.services import ai_service

logger = get_logger(__name__)

MAX_SYLLABUS_CHARS = 30000

SYLLABUS_SYSTEM_PROMPT = (
    "You are an expert at parsing academic syllabi. You extract only what the document "
    "states, use null for anything missing, and always return valid JSON."
)

SYLLABUS_SHAPE = """{
  "isSyllabus": true,
  "courseInfo": {
    "title": "Course title or null",
    "courseCode": "Course code such as CS-101 or null",
    "instructor": "Instructor name or null",
    "semester": "Semester or null",
    "credits": "Number of credits or null",
    "department": "Department or null"
  },
  "assignments": [
    {"name": "Assignment name", "type": "homework/exam/project/quiz/paper/presentation or null",
     "dueDate": "YYYY-MM-DD or null", "weight": "Percent of final grade as a number or null"}
  ],
  "readings": [
    {"title": "Reading title", "author": "Author or null", "required": true}
  ],
  "gradingBreakdown": {"Category name": 25}
}"""


def build_syllabus_prompt(text: str) -> str:
    return f"""Determine whether the following document is a course syllabus and extract its structure.

SYLLABUS TEXT:
{text}

If the document is not a syllabus, set "isSyllabus" to false and leave the other fields empty.

Return ONLY valid JSON with this shape (no markdown, no explanations):
{SYLLABUS_SHAPE}"""


async def analyze_syllabus(text: str) -> SyllabusAnalysis:
    """
    Extract course information from syllabus text.

    Raises:
        InvalidInputError: the text is blank
        AIUnavailableError: every AI provider failed
        MalformedAIResponseError: the reply was not JSON of the expected shape
    """
    if not text or not text.strip():
        raise InvalidInputError("Text content is required")

    text = text.strip()
    if len(text) > MAX_SYLLABUS_CHARS:
        logger.info(f"Syllabus text truncated from {len(text)} to {MAX_SYLLABUS_CHARS} chars")
        text = text[:MAX_SYLLABUS_CHARS]

    answer = await ai_service.generate_content(
        build_syllabus_prompt(text),
        SYLLABUS_SYSTEM_PROMPT,
        max_tokens=3000,
        temperature=0.1,
    )
    data = ai_service.parse_json_reply(answer.answer)

    try:
        analysis = SyllabusAnalysis.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Syllabus reply failed validation: {e.error_count()} errors")
        raise MalformedAIResponseError("Failed to parse syllabus analysis", details=str(e)[:500])

    logger.info(
        f"Syllabus analyzed | is_syllabus={analysis.is_syllabus} | "
        f"assignments={len(analysis.assignments)} | provider={answer.provider}"
    )
    return analysis
