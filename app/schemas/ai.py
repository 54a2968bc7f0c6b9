from typing import Literal

from app.schemas.common import CamelModel


class ChatTurnSchema(CamelModel):
    """One prior turn of the conversation."""
    role: Literal["user", "assistant"]
    content: str


class AskRequest(CamelModel):
    """Question for the study assistant."""
    question: str = ""
    context: str = ""
    history: list[ChatTurnSchema] = []
    in_depth: bool = False


class AskResponse(CamelModel):
    success: bool = True
    answer: str
    provider: Literal["primary", "fallback"]
    backend: str
