"""
Generative-AI backends.

Each provider exposes the same ``generate`` call and raises ``AIProviderError``
on any failure (missing key, network error, timeout, non-2xx, empty
completion), so the AI service can treat them as interchangeable.
"""
import anthropic
import openai

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class AIProviderError(Exception):
    """A single provider failed to produce a completion."""
    pass


class AnthropicProvider:
    """Anthropic Claude via the messages API."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str, timeout: float):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def get_client(self) -> anthropic.Anthropic:
        if not self.api_key:
            raise AIProviderError("ANTHROPIC_API_KEY not configured")
        # Retries are disabled: the fallback provider is the only second attempt
        return anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def generate(self, prompt: str, system_prompt: str, max_tokens: int, temperature: float) -> str:
        client = self.get_client()
        try:
            message = client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
            )
        except anthropic.APIError as e:
            raise AIProviderError(f"Anthropic request failed: {e}") from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        if not text.strip():
            raise AIProviderError("Anthropic returned an empty completion")

        logger.debug(
            f"Anthropic usage | input_tokens={message.usage.input_tokens} | "
            f"output_tokens={message.usage.output_tokens}"
        )
        return text


class OpenAIProvider:
    """OpenAI chat completions."""

    name = "openai"

    def __init__(self, api_key: str, model: str, timeout: float):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def get_client(self) -> openai.OpenAI:
        if not self.api_key:
            raise AIProviderError("OPENAI_API_KEY not configured")
        return openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def generate(self, prompt: str, system_prompt: str, max_tokens: int, temperature: float) -> str:
        client = self.get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            raise AIProviderError(f"OpenAI request failed: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise AIProviderError("OpenAI returned an empty completion")
        return text


def get_providers() -> list:
    """Return the providers in the order they are tried: [primary, fallback]."""
    anthropic_provider = AnthropicProvider(
        settings.anthropic_api_key, settings.claude_model, settings.ai_timeout_seconds
    )
    openai_provider = OpenAIProvider(
        settings.openai_api_key, settings.openai_model, settings.ai_timeout_seconds
    )
    if settings.ai_provider_preference == "openai":
        return [openai_provider, anthropic_provider]
    return [anthropic_provider, openai_provider]
