from app.schemas.common import ErrorResponse
from app.schemas.ai import AskRequest, AskResponse
from app.schemas.citation import CitationRequestBody, CitationResponse, CitationBatchResponse
from app.schemas.flashcard import FlashcardGenerateRequest, FlashcardSetResponse
from app.schemas.syllabus import SyllabusAnalysis, SyllabusAnalysisResponse
from app.schemas.notes import NotesGenerateRequest, NotesResponse, ChatSummaryRequest, ChatSummaryResponse
from app.schemas.upload import ExtractedTextResponse

__all__ = [
    "ErrorResponse",
    "AskRequest", "AskResponse",
    "CitationRequestBody", "CitationResponse", "CitationBatchResponse",
    "FlashcardGenerateRequest", "FlashcardSetResponse",
    "SyllabusAnalysis", "SyllabusAnalysisResponse",
    "NotesGenerateRequest", "NotesResponse", "ChatSummaryRequest", "ChatSummaryResponse",
    "ExtractedTextResponse",
]
