from app.schemas.common import CamelModel


class FlashcardGenerateRequest(CamelModel):
    """Request to generate flashcards; at least one field must be non-blank."""
    class_name: str | None = None
    chat_history: str | None = None
    topic: str | None = None
    context: str | None = None


class FlashcardSchema(CamelModel):
    """A single flashcard."""
    question: str
    answer: str


class FlashcardSetResponse(CamelModel):
    success: bool = True
    flashcards: list[FlashcardSchema]


class OptionsRequest(CamelModel):
    question: str = ""
    correct_answer: str = ""


class OptionsResponse(CamelModel):
    success: bool = True
    options: list[str]
