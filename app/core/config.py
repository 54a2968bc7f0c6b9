from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "CourseConnect Study API"
    debug: bool = False
    environment: str = "development"  # development, production
    log_level: str = ""  # DEBUG, INFO, WARNING, ERROR, CRITICAL (empty = auto based on environment)
    log_to_file: bool = True  # Enable file logging

    # Frontend
    frontend_url: str = "http://localhost:3000"

    # CORS (comma-separated origins, empty = local dev defaults)
    allowed_origins: str = ""

    # Primary AI provider (Anthropic Claude)
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-5-20250929"

    # Fallback AI provider (OpenAI)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Which provider is tried first: "anthropic" or "openai"
    ai_provider_preference: str = "anthropic"
    ai_timeout_seconds: float = 30.0

    # Citation scraping
    scrape_timeout_seconds: float = 10.0

    # Uploads
    max_upload_size_mb: int = 10

    # Rate limiting (slowapi limit string, applied per client IP)
    rate_limit_enabled: bool = True
    ai_rate_limit: str = "30/minute"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

_KNOWN_PROVIDERS = {"anthropic", "openai"}

if settings.ai_provider_preference not in _KNOWN_PROVIDERS:
    raise RuntimeError(
        f"AI_PROVIDER_PREFERENCE must be one of: {', '.join(sorted(_KNOWN_PROVIDERS))} "
        f"(got {settings.ai_provider_preference!r})"
    )
