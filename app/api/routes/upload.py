from datetime import datetime, timezone

from fastapi import APIRouter, File, UploadFile

from app.api.deps import read_upload
from app.schemas.upload import ExtractedTextResponse, ExtractionMetadata, SupportedFormatsResponse
from app.services.file_processor import extract_text, get_supported_formats

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.get("/formats", response_model=SupportedFormatsResponse)
def get_upload_formats():
    """Get information about supported file upload formats."""
    return get_supported_formats()


@router.post("", response_model=ExtractedTextResponse)
async def extract_text_from_upload(file: UploadFile | None = File(None)):
    """
    Extract plain text from an uploaded document.

    Supports: PDF, DOCX and TXT. The file is never stored.
    """
    document = await read_upload(file)
    text = extract_text(document.content, document.filename)

    return ExtractedTextResponse(
        text=text,
        metadata=ExtractionMetadata(
            filename=document.filename,
            file_size=len(document.content),
            format=document.format.value,
            text_length=len(text),
            word_count=len(text.split()),
            extracted_at=datetime.now(timezone.utc),
        ),
    )
