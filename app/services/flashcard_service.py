"""
Flashcard Service: study flashcards and multiple-choice options from course material.

Unlike citations, a malformed AI reply here is an error for the caller
(MalformedAIResponseError); a flashcard set is never silently invented.
"""
import json
import random
from dataclasses import dataclass

from app.core.exceptions import InvalidInputError, MalformedAIResponseError
from app.core.logging_config import get_logger
from app.services import ai_service

logger = get_logger(__name__)

MIN_CARDS = 5
MAX_CARDS = 15
MAX_SECTION_CHARS = 12000

FLASHCARD_SYSTEM_PROMPT = """You are an expert at creating effective study flashcards for college students.
Focus on key concepts and important details. Make cards concise but informative.
Always return valid JSON."""

OPTIONS_SYSTEM_PROMPT = (
    "You are an expert at creating realistic multiple choice question options "
    "for educational tests. Always return valid JSON arrays."
)

PLACEHOLDER_OPTIONS = ("Option B", "Option C", "Option D")


@dataclass
class FlashcardRequest:
    class_name: str | None = None
    chat_history: str | None = None
    topic: str | None = None
    context: str | None = None

    def has_input(self) -> bool:
        return any(
            value and value.strip()
            for value in (self.class_name, self.chat_history, self.topic, self.context)
        )


@dataclass
class Flashcard:
    question: str
    answer: str


def _clip(text: str) -> str:
    text = text.strip()
    return text if len(text) <= MAX_SECTION_CHARS else text[:MAX_SECTION_CHARS] + "\n[truncated]"


def build_flashcard_prompt(request: FlashcardRequest) -> str:
    """Prompt with only the sections the caller supplied."""
    parts = [
        "Generate a set of high-quality flashcards from the information below.",
        "The information may include the class name, recent class chat, a topic, "
        "or notes. Prioritize the most important concepts.",
    ]
    if request.class_name and request.class_name.strip():
        parts.append(f"The flashcards are for the class: {request.class_name.strip()}")
    if request.chat_history and request.chat_history.strip():
        parts.append(
            "Recent chat history. Use the questions asked and answers given to find "
            f"the topics students are focusing on:\n---\n{_clip(request.chat_history)}\n---"
        )
    if request.topic and request.topic.strip():
        parts.append(f"Generate flashcards for the following topic: {request.topic.strip()}")
    if request.context and request.context.strip():
        parts.append(f"Also use the following notes or content:\n---\n{_clip(request.context)}\n---")

    parts.append(
        f"Create between {MIN_CARDS} and {MAX_CARDS} flashcards. Each one needs a clear question "
        "and a concise, accurate answer. Wrap math in LaTeX delimiters ($...$ inline, $$...$$ block)."
    )
    parts.append(
        "Format your response as JSON with exactly this shape:\n"
        '{"flashcards": [{"question": "Question text", "answer": "Answer text"}]}\n\n'
        "Return ONLY the JSON object, no other text."
    )
    return "\n\n".join(parts)


def parse_flashcards(reply: str) -> list[Flashcard]:
    """Validate an AI reply against {"flashcards": [{"question", "answer"}, ...]}."""
    data = ai_service.parse_json_reply(reply)

    cards_data = data.get("flashcards") if isinstance(data, dict) else None
    if not isinstance(cards_data, list) or not cards_data:
        raise MalformedAIResponseError(
            "Failed to parse flashcards response",
            details="Expected a non-empty 'flashcards' list",
        )

    cards = []
    for index, item in enumerate(cards_data):
        question = item.get("question") if isinstance(item, dict) else None
        answer = item.get("answer") if isinstance(item, dict) else None
        if not isinstance(question, str) or not isinstance(answer, str) or not question.strip() or not answer.strip():
            raise MalformedAIResponseError(
                "Failed to parse flashcards response",
                details=f"Flashcard {index} is missing a question or answer",
            )
        cards.append(Flashcard(question=question.strip(), answer=answer.strip()))
    return cards


async def generate_flashcards(request: FlashcardRequest) -> list[Flashcard]:
    """
    Generate an ordered list of flashcards.

    Raises:
        InvalidInputError: no class name, chat history, topic or context
        AIUnavailableError: every AI provider failed
        MalformedAIResponseError: the reply did not match the flashcard shape
    """
    if not request.has_input():
        raise InvalidInputError("Provide a className, chatHistory, topic or context to generate flashcards")

    logger.info(f"Generating flashcards | class={request.class_name} | topic={request.topic}")
    answer = await ai_service.generate_content(
        build_flashcard_prompt(request),
        FLASHCARD_SYSTEM_PROMPT,
        max_tokens=2000,
        temperature=0.5,
    )
    cards = parse_flashcards(answer.answer)
    logger.info(f"Generated {len(cards)} flashcards | provider={answer.provider}")
    return cards


async def generate_options(question: str, correct_answer: str) -> list[str]:
    """Four multiple-choice options for a flashcard, the correct answer among them."""
    if not question or not question.strip() or not correct_answer or not correct_answer.strip():
        raise InvalidInputError("Question and correctAnswer are required")

    prompt = f"""Generate 3 realistic, grammatically correct wrong answers (distractors) for this test question.

Question: {question.strip()}
Correct Answer: {correct_answer.strip()}

The wrong answers must be plausible, related to the topic but factually incorrect, similar in length
and style to the correct answer, and not obviously wrong.

Return ONLY a JSON array of exactly 4 strings: the correct answer and the 3 wrong answers, shuffled."""

    answer = await ai_service.generate_content(prompt, OPTIONS_SYSTEM_PROMPT, max_tokens=500, temperature=0.7)

    try:
        options = json.loads(ai_service.strip_json_fences(answer.answer))
        if not isinstance(options, list) or len(options) != 4:
            raise ValueError("expected a list of 4 options")
        options = [str(option) for option in options]
    except ValueError as e:
        logger.warning(f"Could not parse options reply, using placeholders | error={e}")
        return [correct_answer.strip(), *PLACEHOLDER_OPTIONS]

    if correct_answer.strip() not in options:
        options[random.randrange(4)] = correct_answer.strip()
    return options
