"""
AI Service: prompt construction and completion with a single fallback hop.

Providers are tried in order (primary, then fallback). The first one that
returns a non-empty completion wins; if every provider fails the caller gets
AIUnavailableError, never a partial answer.
"""
import asyncio
import json
import re
import time
from dataclasses import dataclass, field

from app.core.exceptions import AIUnavailableError, InvalidInputError, MalformedAIResponseError
from app.core.logging_config import get_logger
from app.services.ai_providers import AIProviderError, get_providers

logger = get_logger(__name__)

PRIMARY = "primary"
FALLBACK = "fallback"

DEFAULT_SYSTEM_PROMPT = "You are an educational assistant helping students learn effectively."

STUDY_ASSISTANT_PROMPT = """You are CourseConnect AI, an expert teaching assistant that helps students with academic questions across all subjects.

Response guidelines:
1. Be concise: give a direct, helpful answer in 2-3 sentences.
2. Be clear: explain the core concept simply.
3. Be encouraging: use supportive language.
4. Ground your answer in the course context when it is relevant, and name the people, dates and policies it mentions.

Write in plain text without markdown headers or bold markers.
For mathematical expressions use LaTeX: $...$ inline and $$...$$ for blocks."""

IN_DEPTH_PROMPT = """You are CourseConnect AI, providing a comprehensive, detailed analysis of the student's question.

Cover, where they apply:
1. Core concept
2. Step-by-step process
3. Concrete examples and analogies
4. Real-world applications
5. Common mistakes to avoid
6. Practice suggestions
7. Related topics to explore next

Write in plain text without markdown headers or bold markers.
For mathematical expressions use LaTeX: $...$ inline and $$...$$ for blocks."""

ROLE_LABELS = {"user": "Student", "assistant": "Assistant"}


@dataclass
class ChatTurn:
    role: str
    content: str


@dataclass
class AIAnswer:
    answer: str
    provider: str  # PRIMARY or FALLBACK
    backend: str  # provider name, e.g. "anthropic"


@dataclass
class ProviderResult:
    """Outcome of one provider attempt: either text or the error it raised."""
    backend: str
    text: str | None = None
    error: Exception | None = None
    duration_ms: float = field(default=0.0)

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text and self.text.strip())


async def call_provider(provider, prompt: str, system_prompt: str, max_tokens: int, temperature: float) -> ProviderResult:
    """Run one provider's blocking SDK call in a worker thread."""
    start_time = time.time()
    try:
        text = await asyncio.to_thread(provider.generate, prompt, system_prompt, max_tokens, temperature)
        result = ProviderResult(backend=provider.name, text=text)
    except AIProviderError as e:
        result = ProviderResult(backend=provider.name, error=e)
    except Exception as e:
        # SDK errors outside the provider's own mapping still count as a failed hop
        logger.exception(f"Unexpected error from provider {provider.name}")
        result = ProviderResult(backend=provider.name, error=e)
    result.duration_ms = (time.time() - start_time) * 1000
    return result


async def generate_content(
    prompt: str,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    max_tokens: int = 2000,
    temperature: float = 0.7,
) -> AIAnswer:
    """
    Generate a completion, falling back to the second provider once.

    Args:
        prompt: The user prompt
        system_prompt: The system framing for the model
        max_tokens: Maximum tokens in the response
        temperature: Creativity level (0-1)

    Returns:
        AIAnswer naming which provider answered

    Raises:
        AIUnavailableError: every provider failed
    """
    logger.info(f"Starting AI content generation | max_tokens={max_tokens}")
    logger.debug(f"Prompt length: {len(prompt)} chars")

    failures = []
    for position, provider in enumerate(get_providers()):
        role = PRIMARY if position == 0 else FALLBACK
        result = await call_provider(provider, prompt, system_prompt, max_tokens, temperature)
        if result.ok:
            logger.info(
                f"AI generation completed | provider={role} | backend={result.backend} | "
                f"duration={result.duration_ms:.2f}ms"
            )
            return AIAnswer(answer=result.text.strip(), provider=role, backend=result.backend)

        error = result.error or "empty completion"
        logger.warning(
            f"AI provider failed | provider={role} | backend={result.backend} | "
            f"duration={result.duration_ms:.2f}ms | error={error}"
        )
        failures.append(f"{result.backend}: {error}")

    logger.error(f"All AI providers failed | {' | '.join(failures)}")
    raise AIUnavailableError("AI service is currently unavailable", details="; ".join(failures))


def build_prompt(question: str, context: str = "", history: list[ChatTurn] | None = None) -> str:
    """Combine context, prior turns (oldest first) and the question, which goes last."""
    sections = []
    if context and context.strip():
        sections.append(f"Course context:\n{context.strip()}")

    if history:
        lines = [
            f"{ROLE_LABELS.get(turn.role, turn.role.title())}: {turn.content.strip()}"
            for turn in history
            if turn.content and turn.content.strip()
        ]
        if lines:
            sections.append("Conversation so far:\n" + "\n".join(lines))

    sections.append(f"Question: {question.strip()}")
    return "\n\n".join(sections)


async def ask(
    question: str,
    context: str = "",
    history: list[ChatTurn] | None = None,
    in_depth: bool = False,
) -> AIAnswer:
    """Answer a student's question in the context of their course."""
    if not question or not question.strip():
        raise InvalidInputError("Question is required")

    logger.info(f"Answering study question | in_depth={in_depth} | history_turns={len(history or [])}")
    prompt = build_prompt(question, context, history)
    if in_depth:
        return await generate_content(prompt, IN_DEPTH_PROMPT, max_tokens=2000, temperature=0.7)
    return await generate_content(prompt, STUDY_ASSISTANT_PROMPT, max_tokens=1000, temperature=0.7)


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences (```json ... ```) from AI responses."""
    stripped = re.sub(r"^```(?:json)?\s*\n?", "", text.strip())
    stripped = re.sub(r"\n?```\s*$", "", stripped)
    return stripped.strip()


def parse_json_reply(text: str):
    """Parse a JSON reply, tolerating code fences and prose around one object."""
    cleaned = strip_json_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    match = re.search(r"\{[\s\S]*\}", cleaned)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass
    raise MalformedAIResponseError("AI response was not valid JSON", details=cleaned[:200])
