from fastapi import APIRouter, File, Request, UploadFile

from app.api.deps import read_upload
from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.syllabus import SyllabusAnalysisResponse, SyllabusTextRequest
from app.services.file_processor import extract_text
from app.services.syllabus_service import analyze_syllabus

router = APIRouter(prefix="/syllabus", tags=["Syllabus"])


@router.post("/analyze", response_model=SyllabusAnalysisResponse)
@limiter.limit(settings.ai_rate_limit)
async def analyze_syllabus_text(request: Request, body: SyllabusTextRequest):
    """Extract course info, assignments, readings and grading from syllabus text."""
    analysis = await analyze_syllabus(body.text)
    return SyllabusAnalysisResponse(analysis=analysis, text_length=len(body.text.strip()))


@router.post("/analyze-file", response_model=SyllabusAnalysisResponse)
@limiter.limit(settings.ai_rate_limit)
async def analyze_syllabus_file(request: Request, file: UploadFile | None = File(None)):
    """Extract text from an uploaded syllabus, then analyze it."""
    document = await read_upload(file)
    text = extract_text(document.content, document.filename)
    analysis = await analyze_syllabus(text)
    return SyllabusAnalysisResponse(analysis=analysis, text_length=len(text))
